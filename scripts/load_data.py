#!/usr/bin/env python3
"""
Load POS rows from a JSON file into the DuckDB store.

The file holds one list per table; every key is optional:
    {"sales": [...], "sale_items": [...], "products": [...],
     "customers": [...], "expenses": [...]}

Usage:
    python scripts/load_data.py export.json
    python scripts/load_data.py export.json --db data/reports.duckdb
"""
import asyncio
import argparse
import sys
from pathlib import Path

import orjson

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from reporting.exceptions import RecordSourceError
from reporting.observability import setup_logging, get_logger
from reporting.store import DuckDBRecordSource

logger = get_logger("load_data")


async def main(path: Path, db_path: str = None) -> int:
    try:
        data = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        logger.error(f"Cannot read {path}: {e}")
        return 2

    store = DuckDBRecordSource(db_path) if db_path else DuckDBRecordSource()
    loaders = {
        "products": store.insert_products,
        "customers": store.insert_customers,
        "sales": store.insert_sales,
        "sale_items": store.insert_sale_items,
        "expenses": store.insert_expenses,
    }

    try:
        for table, loader in loaders.items():
            rows = data.get(table) or []
            count = await loader(rows)
            logger.info(f"{table}: {count} rows")
    except RecordSourceError as e:
        logger.error(f"Load failed: {e}")
        return 1
    finally:
        await store.close()

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load POS data into DuckDB")
    parser.add_argument("file", type=Path, help="JSON file to load")
    parser.add_argument("--db", help="DuckDB path (default: REPORTS_DB_PATH)")
    args = parser.parse_args()

    setup_logging(level="INFO")
    sys.exit(asyncio.run(main(args.file, args.db)))
