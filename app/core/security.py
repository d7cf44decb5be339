from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from app.core.config import settings

ALGORITHM = "HS256"

def _create_token(user_id: int, email: str, token_type: str, minutes: int) -> str:
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
        "type": token_type
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)

def create_access_token(user_id: int, email: str) -> str:
    #token d'accès court (15 min par défaut)
    return _create_token(user_id, email, "access", settings.JWT_EXPIRE_MIN)

def create_refresh_token(user_id: int, email: str) -> str:
    #token de rafraîchissement (30 jours)
    return _create_token(user_id, email, "refresh", settings.JWT_REFRESH_EXPIRE_MIN)

def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None

def decode_token(token: str) -> Optional[int]:
    """Retourne l'id utilisateur d'un access token valide, sinon None"""
    payload = verify_token(token)
    if payload is None or payload.get("type") != "access":
        return None
    return payload.get("user_id")
