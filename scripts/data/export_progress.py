"""
Export learning progress (one row per card) to CSV or JSON.

Usage:
    python -m scripts.data.export_progress --out progress.csv
    python -m scripts.data.export_progress --type kanji --out kanji.json
    python -m scripts.data.export_progress --out progress.csv --with-content
    python -m scripts.data.export_progress --out progress.csv --with-content --cards-from mongo
"""

from __future__ import annotations

import argparse
from pathlib import Path

from jp_trainer.card_repo import MongoCardRegistry
from jp_trainer.progress import export_progress_rows
from jp_trainer.srs import database


def card_lookup(source: str, session_factory=None):
    """Card lookup for the --with-content columns, from the SQL or Mongo catalogue."""
    if source == "mongo":
        return MongoCardRegistry().lookup
    return database.SqlCardRegistry(session_factory).lookup


def write_export(df, out_path: Path) -> None:
    """Write the dataframe as CSV or JSON depending on the extension."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.suffix.lower() == ".json":
        df.to_json(out_path, orient="records", date_format="iso", force_ascii=False, indent=2)
    else:
        df.to_csv(out_path, index=False, encoding="utf-8")


def main():
    parser = argparse.ArgumentParser(description="Export memory levels to CSV/JSON")
    parser.add_argument("--out", type=Path, required=True, help="Output file (.csv or .json)")
    parser.add_argument("--type", dest="card_type", default=None, help="Only this card type")
    parser.add_argument(
        "--with-content",
        action="store_true",
        help="Include front/back from the card catalogue"
    )
    parser.add_argument(
        "--cards-from",
        choices=["sql", "mongo"],
        default="sql",
        help="Card catalogue used by --with-content"
    )
    args = parser.parse_args()

    session_factory = database.get_session_factory()
    store = database.SqlStateStore(session_factory)
    lookup = card_lookup(args.cards_from, session_factory) if args.with_content else None

    df = export_progress_rows(store, args.card_type, lookup_card=lookup)
    write_export(df, args.out)
    print(f"✓ Exported {len(df)} cards to {args.out}")


if __name__ == "__main__":
    main()
