#!/usr/bin/env python3
"""Replace stored data with a JSON backup or a CSV export."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import storage


def main(path: Path) -> int:
    text = path.read_text(encoding='utf-8-sig')
    if path.suffix.lower() == '.csv':
        try:
            expenses = storage.import_from_csv(text)
        except ValueError as exc:
            print(f"❌ {exc}", file=sys.stderr)
            return 1
        ok = storage.save_expenses(expenses)
    else:
        ok = storage.import_data(text)

    if not ok:
        print("❌ Failed to import data. Please check the file format.", file=sys.stderr)
        return 1
    print(f"✅ Imported data from {path.name}; {len(storage.get_expenses())} expenses stored")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Import a backup into local storage (replaces existing data).')
    parser.add_argument('path', type=Path, help='JSON backup or CSV export')
    args = parser.parse_args()
    sys.exit(main(args.path))
