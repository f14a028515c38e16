"""
Seat tokens: a JWT issued per human seat when a match starts.
Holding the token is what proves a request comes from that player.
"""

from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from conquest.config import JWT_SECRET, SEAT_TOKEN_EXPIRE_HOURS

ALGORITHM = "HS256"
security = HTTPBearer(auto_error=False)


def create_seat_token(player_id: str, room_id: str) -> str:
    expire = datetime.utcnow() + timedelta(hours=SEAT_TOKEN_EXPIRE_HOURS)
    payload = {"sub": player_id, "room": room_id, "exp": expire}
    return jwt.encode(payload, JWT_SECRET, algorithm=ALGORITHM)


def decode_seat_token(token: str) -> dict | None:
    """Claims of a valid token, or None if the signature or expiry check fails."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or not payload.get("room"):
        return None
    return payload


def get_seat_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_seat_token(credentials.credentials)
    if not claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired seat token",
        )
    return claims


def get_seat_claims_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict | None:
    if not credentials:
        return None
    return decode_seat_token(credentials.credentials)
