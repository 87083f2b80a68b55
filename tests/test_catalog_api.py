from datetime import datetime, timezone

import pytest

from vtmusic.db import models as m
from vtmusic.services.catalog import add_tag_to_song, genre_counts, get_or_create_tag, tags_for_song
from vtmusic.services.seed import SONGS, VTUBERS, reset_catalog, seed_catalog


@pytest.fixture()
def seeded(db):
    return seed_catalog(db)


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# --- vtubers -----------------------------------------------------------------

def test_list_vtubers_most_songs_first(client, seeded):
    r = client.get("/api/vtubers")
    assert r.status_code == 200
    body = r.json()
    assert len(body) == len(VTUBERS)
    counts = [v["song_count"] for v in body]
    assert counts == sorted(counts, reverse=True)
    assert body[0]["name"] == "星街すいせい"
    assert body[0]["song_count"] == 4


def test_search_vtubers_by_name(client, seeded):
    r = client.get("/api/vtubers", params={"q": "azk"})
    assert [v["name"] for v in r.json()] == ["AZKi"]


def test_get_vtuber_and_missing_vtuber(client, seeded):
    vid = seeded["宝鐘マリン"]
    assert client.get(f"/api/vtubers/{vid}").json()["name"] == "宝鐘マリン"

    r = client.get("/api/vtubers/9999")
    assert r.status_code == 200
    assert r.json() is None


def test_vtuber_songs_newest_first(client, seeded):
    r = client.get(f"/api/vtubers/{seeded['宝鐘マリン']}/songs")
    titles = [s["title"] for s in r.json()]
    assert titles == ["歌枠アーカイブ #1", "Unison (Cover)", "宝島 (Cover)"]


# --- songs -------------------------------------------------------------------

def test_list_songs_pagination_and_artist_join(client, seeded):
    r = client.get("/api/songs", params={"limit": 3})
    assert r.status_code == 200
    page = r.json()
    assert len(page) == 3
    assert page[0]["title"] == "歌枠アーカイブ #1"
    assert page[0]["vtuber_name"] == "宝鐘マリン"
    assert page[0]["vtuber_avatar"] == "https://via.placeholder.com/150"
    assert page[0]["video_id"] == "example8"

    rest = client.get("/api/songs", params={"skip": 3, "limit": 100}).json()
    assert len(rest) == len(SONGS) - 3
    assert not {s["id"] for s in page} & {s["id"] for s in rest}


def test_get_song_and_missing_song(client, seeded):
    first = client.get("/api/songs", params={"limit": 1}).json()[0]
    r = client.get(f"/api/songs/{first['id']}")
    assert r.json()["title"] == first["title"]

    r = client.get("/api/songs/424242")
    assert r.status_code == 200
    assert r.json() is None


@pytest.mark.parametrize("path", ["/api/songs/abc", "/api/songs/0", "/api/songs/abc/related"])
def test_malformed_ids_are_rejected(client, path):
    assert client.get(path).status_code == 422


def test_overlong_search_is_rejected(client):
    assert client.get("/api/songs/search", params={"q": "x" * 201}).status_code == 422


def test_search_matches_title_or_original_by_views(client, seeded):
    r = client.get("/api/songs/search", params={"q": "千本桜"})
    body = r.json()
    assert [s["view_count"] for s in body] == [9_000_000, 7_000_000]

    r = client.get("/api/songs/search", params={"q": "テーゼ", "vtuber_id": seeded["常闇トワ"]})
    assert [s["vtuber_name"] for s in r.json()] == ["常闇トワ"]

    r = client.get("/api/songs/search", params={"q": "", "genre": "original"})
    assert {s["title"] for s in r.json()} == {"Stellar Stellar", "GHOST"}

    r = client.get("/api/songs/search", params={"q": "cover", "original_song": "宝"})
    assert [s["original_song"] for s in r.json()] == ["宝島"]


def test_songs_by_genre(client, seeded):
    r = client.get("/api/songs/by-genre/cover", params={"limit": 5})
    body = r.json()
    assert len(body) == 5
    assert {s["genre"] for s in body} == {"cover"}


def test_songs_by_original(client, seeded):
    r = client.get("/api/songs/by-original", params={"original_song": "残酷な天使のテーゼ"})
    body = r.json()
    assert [s["vtuber_name"] for s in body] == ["天音かなた", "常闇トワ"]
    assert client.get("/api/songs/by-original", params={"original_song": "残酷"}).json() == []


def test_related_endpoint(client, seeded):
    songs = client.get("/api/songs/by-original", params={"original_song": "千本桜"}).json()
    suisei = next(s for s in songs if s["vtuber_name"] == "星街すいせい")

    r = client.get(f"/api/songs/{suisei['id']}/related", params={"limit": 4})
    related = r.json()

    assert len(related) == 4
    assert suisei["id"] not in [s["id"] for s in related]
    # other 千本桜 cover, then Suisei's own songs by views
    assert related[0]["original_song"] == "千本桜"
    assert [s["title"] for s in related[1:]] == ["Stellar Stellar", "GHOST", "キングダム (Cover)"]


def test_related_for_missing_song_is_empty(client, seeded):
    assert client.get("/api/songs/9999/related").json() == []


# --- tags --------------------------------------------------------------------

def test_tags_listing_and_lookup(client, db, seeded):
    tags = client.get("/api/tags").json()
    names = [t["name"] for t in tags]
    assert names == sorted(names)
    assert "ボカロ" in names

    vocaloid = next(t for t in tags if t["name"] == "ボカロ")
    songs = client.get(f"/api/tags/{vocaloid['id']}/songs").json()
    assert {s["original_song"] for s in songs} == {"千本桜"}
    # newest upload first
    assert [s["vtuber_name"] for s in songs] == ["AZKi", "星街すいせい"]

    song_tags = client.get(f"/api/songs/{songs[0]['id']}/tags").json()
    assert {t["name"] for t in song_tags} == {"ボカロ", "アップテンポ"}


def test_tagging_is_idempotent(db, make_vtuber, make_song):
    song = make_song(make_vtuber(), uploaded=datetime(2024, 5, 1, tzinfo=timezone.utc))
    tag = get_or_create_tag(db, " コラボ ")
    assert get_or_create_tag(db, "コラボ").id == tag.id

    add_tag_to_song(db, song.id, tag.id)
    add_tag_to_song(db, song.id, tag.id)
    db.commit()

    assert [t.name for t in tags_for_song(db, song.id)] == ["コラボ"]


def test_reset_then_reseed_gives_same_catalog(db, seeded):
    reset_catalog(db)
    db.commit()
    assert db.query(m.Song).count() == 0
    assert db.query(m.SongTag).count() == 0

    seed_catalog(db)
    assert db.query(m.Song).count() == len(SONGS)
    assert db.query(m.Tag).count() == 8


def test_genre_counts_most_common_first(db, seeded):
    assert genre_counts(db) == [("cover", 7), ("original", 2), ("singing_stream", 1)]
