# healthconnect/authz.py
from __future__ import annotations

from typing import Callable
from fastapi import Depends

from healthconnect.auth import get_current_user
from healthconnect.db import MongoStore
from healthconnect.errors import Forbidden

PATIENT = "patient"
PROVIDER = "provider"
ROLES = (PATIENT, PROVIDER)


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.get("/doctor", dependencies=[Depends(require_role("provider"))])
        def doctor_only(...):
            ...
    """
    allowed = set(r.strip().lower() for r in allowed_roles if r)

    def _dep(user: dict = Depends(get_current_user)) -> dict:
        role = (user.get("role") or "").strip().lower()
        if role not in allowed:
            if allowed == {PROVIDER}:
                raise Forbidden("Access restricted to healthcare providers")
            raise Forbidden("Access restricted to patients" if allowed == {PATIENT} else "Insufficient role")
        return user

    return _dep


def ensure_self(caller: dict, owner_id: str) -> None:
    if caller.get("id") != str(owner_id):
        raise Forbidden("You can only access your own records")


def is_assigned(store: MongoStore, doctor_id: str, patient_id: str) -> bool:
    return store.assignments.find_one({"doctor_id": str(doctor_id), "patient_id": str(patient_id)}) is not None


def ensure_assigned(store: MongoStore, doctor_id: str, patient_id: str) -> None:
    """A provider sees a patient's detail only while assigned to them."""
    if not is_assigned(store, doctor_id, patient_id):
        raise Forbidden("Access denied. This patient is not assigned to you.")


def ensure_can_view_patient(store: MongoStore, caller: dict, patient_id: str) -> None:
    """Patients read their own data; providers read assigned patients only."""
    if caller.get("role") == PROVIDER:
        ensure_assigned(store, caller["id"], patient_id)
    else:
        ensure_self(caller, patient_id)
