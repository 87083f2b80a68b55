import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vtmusic.core.config import configure_logging, settings
from vtmusic.api.auth import router as auth_router
from vtmusic.api.favorites import router as favorites_router
from vtmusic.api.history import router as history_router
from vtmusic.api.playlists import router as playlists_router
from vtmusic.api.songs import router as songs_router
from vtmusic.api.tags import router as tags_router
from vtmusic.api.vtubers import router as vtubers_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="vtmusic-api")

# --- CORS setup --------------------------------------------------------------
# Explicit dev origins by default; override with ALLOWED_ORIGINS (comma-separated).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,  # the session cookie rides along
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
    max_age=86400,
)


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "service": settings.service_name}


# Routers
for router in (
    auth_router,
    vtubers_router,
    songs_router,
    tags_router,
    playlists_router,
    favorites_router,
    history_router,
):
    app.include_router(router, prefix="/api")

logger.info("%s routes registered", settings.service_name)
