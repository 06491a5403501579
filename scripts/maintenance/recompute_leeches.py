"""
Recompute leech_count / is_leech for every stored card from the review log.

Stored leech fields are a cache of the review history. Run this after a
failed state write, a history backfill, or a change of leech threshold.

Usage:
    python -m scripts.maintenance.recompute_leeches
    python -m scripts.maintenance.recompute_leeches --type kanji
    python -m scripts.maintenance.recompute_leeches --dry-run
"""

from __future__ import annotations

import argparse
from typing import Optional

from jp_trainer.srs import database, leech
from jp_trainer.srs.grading import GradingService


def recompute_all(
    service: GradingService,
    card_type: Optional[str] = None,
    dry_run: bool = False
) -> dict[str, int]:
    """
    Rescan every stored state.

    Returns:
        Counts: scanned, changed, leeches (after recompute)
    """
    stats = {"scanned": 0, "changed": 0, "leeches": 0}

    for state in service.state_store.list_states(card_type):
        stats["scanned"] += 1
        if dry_run:
            status = leech.compute_leech(state.card_id, service.event_log, service.leech_page_size)
            new_count, is_leech = status.leech_count, status.is_leech
        else:
            refreshed = service.recompute_state(state.card_id) or state
            new_count, is_leech = refreshed.leech_count, refreshed.is_leech

        if (new_count, is_leech) != (state.leech_count, state.is_leech):
            stats["changed"] += 1
            print(f"  {'[DRY RUN] ' if dry_run else ''}{state.card_id}: "
                  f"leech_count {state.leech_count} -> {new_count} (leech={is_leech})")
        if is_leech:
            stats["leeches"] += 1

    return stats


def main():
    parser = argparse.ArgumentParser(description="Rebuild leech fields from the review log")
    parser.add_argument("--type", dest="card_type", default=None, help="Only this card type")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without writing them"
    )
    args = parser.parse_args()

    database.init_db()
    session_factory = database.get_session_factory()
    service = GradingService(
        state_store=database.SqlStateStore(session_factory),
        event_log=database.SqlEventLog(session_factory),
    )

    print(f"Recomputing leeches ({args.card_type or 'all types'})...")
    stats = recompute_all(service, args.card_type, args.dry_run)

    print(f"\n{'=' * 60}")
    print("SUMMARY")
    print(f"{'=' * 60}")
    print(f"Scanned:  {stats['scanned']}")
    print(f"Changed:  {stats['changed']}")
    print(f"Leeches:  {stats['leeches']}")
    if args.dry_run:
        print("\n⚠ DRY RUN MODE - No states were written")


if __name__ == "__main__":
    main()
