#!/usr/bin/env python3
"""
Fetch VTuber song videos from the YouTube Data API and import them.

  YOUTUBE_API_KEY=... DATABASE_URL=... python scripts/fetch_youtube_data.py
  python scripts/fetch_youtube_data.py --query "星街すいせい 歌ってみた" --max-results 5
"""
import argparse
import asyncio

from vtmusic.clients.youtube import YouTubeClient, YouTubeNotConfigured
from vtmusic.core.config import configure_logging
from vtmusic.db.session import SessionLocal
from vtmusic.services.youtube_importer import import_queries


DEFAULT_QUERIES = [
    "星街すいせい 歌ってみた",
    "宝鐘マリン 歌ってみた",
    "湊あくあ 歌ってみた",
    "白銀ノエル 歌ってみた",
    "不知火フレア 歌ってみた",
    "角巻わため 歌ってみた",
    "常闇トワ 歌ってみた",
    "天音かなた 歌ってみた",
    "雪花ラミィ 歌ってみた",
    "桃鈴ねね 歌ってみた",
]


async def run(queries, max_results: int, delay: float) -> int:
    client = YouTubeClient(strict=True)
    db = SessionLocal()
    try:
        print(f"Searching {len(queries)} queries...")
        stats = await import_queries(db, client, queries, max_results=max_results, delay=delay)
    finally:
        db.close()
    print(f"Finished. added:{stats.added} skipped:{stats.skipped} "
          f"new vtubers:{stats.vtubers_created} failed queries:{stats.failed_queries}")
    return 1 if stats.failed_queries else 0


def main():
    ap = argparse.ArgumentParser(description="Import VTuber songs from YouTube")
    ap.add_argument("--query", action="append", help="search query (repeatable); defaults to a built-in list")
    ap.add_argument("--max-results", type=int, default=10)
    ap.add_argument("--delay", type=float, default=1.0, help="seconds to wait between queries")
    args = ap.parse_args()

    configure_logging()
    try:
        return asyncio.run(run(args.query or DEFAULT_QUERIES, args.max_results, args.delay))
    except YouTubeNotConfigured as e:
        print(f"Not configured: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
