"""
Reset the learning database (memory levels and review logs).

DANGEROUS: This deletes all review history!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_learning_db
    python -m scripts.maintenance.reset_learning_db --yes   # skip the prompt
"""

from __future__ import annotations

import argparse

from jp_trainer.srs import database


def main():
    parser = argparse.ArgumentParser(description="Drop and recreate the SRS tables")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Reset without asking for confirmation"
    )
    args = parser.parse_args()

    print("=" * 60)
    print("WARNING: Reset Learning Database")
    print("=" * 60)
    print()
    print(f"Target: {'TEST' if database.is_test_mode() else 'PRODUCTION'} database")
    print("This will DELETE:")
    print("  - All memory levels (level, stability, difficulty, due, leeches)")
    print("  - All review logs (every past grade)")
    print("  - All cards stored in the SQL cards table")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    print("\nResetting database...")
    database.reset_db()
    print("✓ Database reset complete!")
    print("\nThe database now has empty tables ready for new reviews.")


if __name__ == "__main__":
    main()
