# healthconnect/routes/auth.py
from fastapi import APIRouter, Depends

from healthconnect.auth import create_access_token, get_current_user, revoke_token
from healthconnect.db import MongoStore, get_store
from healthconnect.schemas.auth import LoginRequest, RegisterRequest
from healthconnect.services import profiles
from healthconnect.utils.logger import log_activity

router = APIRouter(prefix="/auth", tags=["auth"])


def _session(user: dict) -> dict:
    uid = str(user["_id"])
    return {
        "_id": uid,
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role"),
        "token": create_access_token(uid, user.get("role")),
    }


# ---------- Register (patient or provider) ----------
@router.post("/register", status_code=201)
def register(payload: RegisterRequest, store: MongoStore = Depends(get_store)):
    user = profiles.register(store, payload.model_dump())
    log_activity(store, str(user["_id"]), "register", {"role": user["role"]})
    return _session(user)


# ---------- Email/Password Login ----------
@router.post("/login")
def login(payload: LoginRequest, store: MongoStore = Depends(get_store)):
    user = profiles.authenticate(store, payload.email, payload.password, payload.role)
    log_activity(store, str(user["_id"]), "login_password", {"portal": payload.role})
    return _session(user)


# ---------- Logout ----------
@router.post("/logout")
def logout(current_user: dict = Depends(get_current_user), store: MongoStore = Depends(get_store)):
    revoke_token(store, current_user["jti"], current_user["id"], current_user["exp"], reason="logout")
    log_activity(store, current_user["id"], "logout")
    return {"message": "Logged Out"}


@router.get("/me")
def me(current_user: dict = Depends(get_current_user)):
    return {k: current_user[k] for k in ("id", "role", "name", "email")}
