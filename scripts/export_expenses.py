#!/usr/bin/env python3
"""Export stored expenses to a JSON backup or a CSV file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import storage
from expense_tracker.config import EXPORTS_DIR, ensure_data_directories


def main(fmt: str = 'json', output: Path | None = None) -> Path:
    if fmt == 'csv':
        payload = storage.export_to_csv(storage.get_expenses())
    else:
        payload = storage.export_data()

    if output is None:
        ensure_data_directories()
        output = EXPORTS_DIR / storage.export_filename(fmt)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding='utf-8')
    print(f"Exported {len(storage.get_expenses())} expenses to {output}")
    return output


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export stored expenses.')
    parser.add_argument('--format', choices=['json', 'csv'], default='json', help='Output format')
    parser.add_argument('--output', type=Path, default=None, help='Destination file (defaults to data/exports/)')
    args = parser.parse_args()
    main(fmt=args.format, output=args.output)
