from vtmusic.services.related import get_related_songs


def _ids(rows):
    return [r.id for r in rows]


def test_same_cover_tier_comes_first_ordered_by_views(db, make_vtuber, make_song):
    a = make_vtuber("A")
    x = make_song(a, original_song="O1", view_count=100)
    y = make_song(a, original_song="O1", view_count=50)

    related = get_related_songs(db, x.id, limit=5)

    assert related[0].id == y.id
    assert [r for r in related if r.original_song == "O1"] == [related[0]]


def test_cover_tier_sorted_by_view_count_desc(db, make_vtuber, make_song):
    a, b, c = make_vtuber("A"), make_vtuber("B"), make_vtuber("C")
    source = make_song(a, original_song="千本桜", view_count=10)
    low = make_song(b, original_song="千本桜", view_count=5)
    high = make_song(c, original_song="千本桜", view_count=900)
    make_song(c, original_song="宝島", view_count=10_000)

    related = get_related_songs(db, source.id, limit=2)

    assert _ids(related) == [high.id, low.id]


def test_never_includes_source_and_respects_limit(db, make_vtuber, make_song):
    a = make_vtuber("A")
    songs = [make_song(a, view_count=i) for i in range(8)]

    for limit in (1, 3, 7, 20):
        related = get_related_songs(db, songs[0].id, limit=limit)
        assert songs[0].id not in _ids(related)
        assert len(related) <= limit
    assert len(get_related_songs(db, songs[0].id, limit=3)) == 3


def test_artist_tier_precedes_genre_tier(db, make_vtuber, make_song):
    a, b = make_vtuber("A"), make_vtuber("B")
    source = make_song(a, genre="rock")
    same_artist = make_song(a, genre="jazz", view_count=1)
    same_genre = make_song(b, genre="rock", view_count=1_000_000)
    make_song(b, genre="ballad", view_count=5)

    related = get_related_songs(db, source.id, limit=10)

    assert _ids(related) == [same_artist.id, same_genre.id]


def test_tiers_are_not_resorted_across_each_other(db, make_vtuber, make_song):
    a, b = make_vtuber("A"), make_vtuber("B")
    source = make_song(a, genre="pop", original_song="Unison")
    cover = make_song(b, genre="anime", original_song="Unison", view_count=1)
    artist = make_song(a, genre="jazz", view_count=50)
    genre = make_song(b, genre="pop", view_count=10_000)

    related = get_related_songs(db, source.id, limit=10)

    assert _ids(related) == [cover.id, artist.id, genre.id]


def test_song_matching_several_tiers_is_listed_once(db, make_vtuber, make_song):
    a, b = make_vtuber("A"), make_vtuber("B")
    source = make_song(a, genre="cover", original_song="O1")
    both = make_song(a, genre="cover", original_song="O1", view_count=10)
    other_artist = make_song(a, genre="original", view_count=3)
    other_genre = make_song(b, genre="cover", view_count=2)

    related = get_related_songs(db, source.id, limit=10)

    assert _ids(related) == [both.id, other_artist.id, other_genre.id]


def test_later_tiers_only_fill_remaining_need(db, make_vtuber, make_song):
    a, b = make_vtuber("A"), make_vtuber("B")
    source = make_song(a, genre="cover", original_song="O1")
    c1 = make_song(b, genre="cover", original_song="O1", view_count=9)
    a1 = make_song(a, genre="original", view_count=7)
    make_song(a, genre="original", view_count=6)
    make_song(b, genre="cover", view_count=100)

    related = get_related_songs(db, source.id, limit=2)

    assert _ids(related) == [c1.id, a1.id]


def test_unknown_song_gives_empty_list(db, make_vtuber, make_song):
    make_song(make_vtuber("A"))
    assert get_related_songs(db, 9999, limit=5) == []


def test_song_without_original_skips_cover_tier(db, make_vtuber, make_song):
    a, b = make_vtuber("A"), make_vtuber("B")
    source = make_song(a, genre="original", original_song=None)
    # Null original_song must not match other null rows as "same cover"
    stranger = make_song(b, genre="ballad", original_song=None, view_count=1000)

    related = get_related_songs(db, source.id, limit=5)

    assert stranger.id not in _ids(related)
