"""
Create the HayQC database and optionally seed two sample tenants.

Usage:
    python scripts/seed_db.py                    # Create tables at HAYQC_DB_PATH
    python scripts/seed_db.py --seed             # Also add sample tenants
    python scripts/seed_db.py --db qc.db --seed  # Use a specific file
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from access import init_db, seed_sample_data
from core.config import get_settings


def main():
    parser = argparse.ArgumentParser(description="Initialize the HayQC database")
    parser.add_argument(
        "--db",
        type=Path,
        help="Database file (default: HAYQC_DB_PATH or hayqc.db)"
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert two sample companies with users and a PO hierarchy each"
    )

    args = parser.parse_args()
    db_path = args.db or get_settings().db_path

    init_db(db_path)
    print(f"Database initialized: {db_path}")

    if args.seed:
        ids = seed_sample_data(db_path)
        print("Seeded sample data:")
        print(json.dumps(ids, indent=2))


if __name__ == "__main__":
    main()
