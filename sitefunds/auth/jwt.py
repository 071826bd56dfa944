from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from sitefunds.config import settings


def create_access_token(user_id: str, tenant_id: str) -> str:
    """Create a signed JWT session token."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {
        "sub": user_id,
        "tenant_id": tenant_id,
        "type": "session",
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT. Returns payload or None if invalid."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        if payload.get("type") != "session":
            return None
        if not payload.get("sub") or not payload.get("tenant_id"):
            return None
        return payload
    except JWTError:
        return None
