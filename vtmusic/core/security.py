from datetime import datetime, timezone

import jwt

from vtmusic.core.config import settings


def create_access_token(*, sub: str, role: str = "user") -> str:
    """Session token as minted by the login flow; `sub` is the users.id."""
    now = int(datetime.now(tz=timezone.utc).timestamp())
    payload = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + settings.jwt_ttl_minutes * 60,
        "sub": sub,
        "role": role,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        leeway=60,  # tolerate small clock skew
    )
