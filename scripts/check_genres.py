#!/usr/bin/env python3
"""Print the genres present in the catalog and how many songs each has."""
from vtmusic.db.session import SessionLocal
from vtmusic.services.catalog import genre_counts


def main():
    db = SessionLocal()
    try:
        rows = genre_counts(db)
    finally:
        db.close()

    if not rows:
        print("No songs in the catalog.")
        return 0
    print("Songs count by genre:")
    for genre, count in rows:
        print(f"  - {genre}: {count} songs")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
