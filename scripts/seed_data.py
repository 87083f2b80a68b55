#!/usr/bin/env python3
"""
Populate the database with sample VTuber music data.

  DATABASE_URL=... python scripts/seed_data.py [--keep]
"""
import argparse

from vtmusic.core.config import configure_logging
from vtmusic.db.session import SessionLocal
from vtmusic.services.seed import reset_catalog, seed_catalog


def main():
    ap = argparse.ArgumentParser(description="Seed the catalog with sample data")
    ap.add_argument("--keep", action="store_true", help="do not wipe existing catalog/library rows first")
    args = ap.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        if not args.keep:
            print("Cleaning up existing data...")
            reset_catalog(db)
        ids = seed_catalog(db)
    except Exception as e:
        db.rollback()
        print(f"Seeding failed: {e}")
        return 1
    finally:
        db.close()

    for name, vid in ids.items():
        print(f"  {name}: {vid}")
    print("Seeding completed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
