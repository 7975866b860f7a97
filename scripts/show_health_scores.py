"""
Show Health Scores Script
Prints the latest stored health score for each entity.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import bizhealth modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from bizhealth.database.connection import close_db, session_scope
from bizhealth.scoring.repository import HealthScoreRepository

STATUS_ICONS = {
    "healthy": "🟢",
    "warning": "🟡",
    "critical": "🔴",
}


async def show_latest_scores(entity_ids: list[str], limit: int = 50) -> None:
    """Print the latest score per entity."""
    async with session_scope() as session:
        repository = HealthScoreRepository(session)
        records = await repository.get_latest_per_entity(entity_ids, limit=limit)

        if not records:
            print("\n📋 No health scores found.")
            return

        print(f"\n📋 Latest Health Scores ({len(records)}):")
        print("-" * 72)
        for record in records:
            icon = STATUS_ICONS.get(record.health_status, "•")
            percentile = record.benchmark_percentile if record.benchmark_percentile is not None else "-"
            print(
                f"  {icon} {record.entity_id:<30} {float(record.overall_score):6.2f}  "
                f"p{percentile:<4} {record.calculated_at:%Y-%m-%d %H:%M}"
            )
            if record.primary_issue:
                print(f"      ↳ {record.primary_issue}")
        print("-" * 72)


async def main() -> None:
    """Main script entry point."""
    print("=" * 72)
    print("📊 Business Health Scores")
    print("=" * 72)

    entity_ids = [arg for arg in sys.argv[1:] if arg.strip()]

    try:
        await show_latest_scores(entity_ids)
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
