from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vtmusic.api.deps import get_db
from vtmusic.core.security import create_access_token
from vtmusic.db import models as m
from vtmusic.db import schemas as s
from vtmusic.main import app
from vtmusic.services.catalog import create_song, create_vtuber


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    m.Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def user(db):
    row = m.User(open_id="oauth|listener", name="Listener", role="user")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture()
def other_user(db):
    row = m.User(open_id="oauth|someone-else", name="Someone", role="user")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _bearer(user_row) -> dict:
    return {"Authorization": f"Bearer {create_access_token(sub=str(user_row.id))}"}


@pytest.fixture()
def headers_for():
    return _bearer


@pytest.fixture()
def auth_headers(user):
    return _bearer(user)


@pytest.fixture()
def make_vtuber(db):
    def _make(name="Suisei", **kw):
        row = create_vtuber(db, name=name, **kw)
        db.commit()
        return row
    return _make


@pytest.fixture()
def make_song(db):
    counter = {"n": 0}

    def _make(vtuber, *, title=None, genre="cover", original_song=None, view_count=0,
              duration=200, uploaded=None):
        counter["n"] += 1
        n = counter["n"]
        row = create_song(db, s.SongCreate(
            title=title or f"Song {n}",
            vtuber_id=vtuber.id,
            video_url=f"https://www.youtube.com/watch?v=vid{n:04d}",
            duration=duration,
            genre=genre,
            original_song=original_song,
            upload_date=uploaded or datetime(2023, 1, n % 28 + 1, tzinfo=timezone.utc),
            view_count=view_count,
        ))
        db.commit()
        return row
    return _make
