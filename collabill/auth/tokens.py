import hashlib
import hmac
import secrets
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode
from collabill.config import settings

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def new_one_time_token() -> str:
    return secrets.token_urlsafe(32)

# only the keyed hash of invitation / reset tokens is ever stored
def hash_one_time_token(token: str) -> str:
    msg = token.encode("utf-8")
    key = settings.token_pepper.encode("utf-8")
    digest = hmac.new(key, msg, hashlib.sha256).hexdigest()
    return digest

def invitation_expiry() -> datetime:
    return now_utc() + timedelta(days=settings.invitation_expires_days)

def password_reset_expiry() -> datetime:
    return now_utc() + timedelta(minutes=settings.password_reset_expires_minutes)

def build_link(path: str, token: str) -> str:
    return f"{settings.base_url.rstrip('/')}/{path.lstrip('/')}?{urlencode({'token': token})}"

def issue_access_token(user_id: str | uuid.UUID) -> str:
    user_id = str(user_id)
    iat = now_utc()
    exp = iat + timedelta(minutes=settings.access_token_expires_minutes)
    payload = {
        "sub": user_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
