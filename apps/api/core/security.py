"""
Bearer token handling.

Runners sign in through the Social Runner web app; this API only verifies
the HS256 token it issues and reads the runner id from the ``sub`` claim.
Tokens are minted here for tests and internal tooling.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
from jose import JWTError, jwt
from core.config import settings

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 7 * 24 * 60  # one week
MIN_SECRET_KEY_LENGTH = 32

# Fail at import rather than sign tokens with a guessable key
if len(settings.SECRET_KEY) < MIN_SECRET_KEY_LENGTH:
    raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters")


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` (must include "sub") with an expiry."""
    claims = dict(data)
    claims["exp"] = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Claims of a valid, unexpired token; None for anything else."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
