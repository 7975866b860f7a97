"""
Rate Limiting Utilities
Rate limiting configuration for scoring endpoints that write history.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
