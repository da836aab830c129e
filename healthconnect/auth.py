# healthconnect/auth.py
from datetime import datetime, timedelta, timezone
import uuid
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from bson import ObjectId
from bson.errors import InvalidId

from healthconnect import settings
from healthconnect.db import MongoStore, get_store

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.JWT_ALG
ACCESS_TOKEN_EXPIRE_DAYS = settings.ACCESS_TOKEN_EXPIRE_DAYS

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# --- password utils ----------------------------------------------------------
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# --- JWT helpers -------------------------------------------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    iat = _now_utc()
    exp = iat + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def decode_token(raw: str) -> dict:
    try:
        return jwt.decode(raw, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")

def is_revoked(store: MongoStore, jti: str) -> bool:
    return store.revoked_tokens.find_one({"jti": jti}) is not None

def revoke_token(store: MongoStore, jti: str, sub: str, exp: int, reason: str = "logout") -> None:
    # upsert so double-logout is harmless
    store.revoked_tokens.update_one(
        {"jti": jti},
        {"$set": {"jti": jti, "sub": sub, "exp": exp, "reason": reason}},
        upsert=True,
    )


# --- dependency used by the routers -----------------------------------------
def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None

def get_current_user(request: Request, store: MongoStore = Depends(get_store)) -> dict:
    """
    Resolve the Authorization: Bearer token to {id, role, name, email}.
    Missing, malformed, revoked or orphaned tokens all answer 401.
    """
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")

    payload = decode_token(token)

    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Wrong token type")
    if is_revoked(store, payload.get("jti", "")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been revoked")

    sub = payload.get("sub")
    try:
        user = store.users.find_one({"_id": ObjectId(sub)})
    except (InvalidId, TypeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid subject")

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    current = {
        "id": str(user["_id"]),
        "role": user.get("role", "patient"),
        "name": user.get("name"),
        "email": user.get("email"),
        "jti": payload["jti"],
        "exp": payload["exp"],
    }
    request.state.actor = current
    return current
