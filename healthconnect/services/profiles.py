# healthconnect/services/profiles.py
"""
Patient/provider records and the doctor-patient relation.

Assignments live in their own collection (one document per pair), so
"doctor's patients" and "patient's doctors" are two queries over the same
rows and cannot drift apart.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from healthconnect.auth import get_password_hash, verify_password
from healthconnect.authz import PATIENT, PROVIDER, ROLES
from healthconnect.db import MongoStore
from healthconnect.errors import (
    DuplicateEmail,
    InvalidCredentials,
    NotFound,
    RoleMismatch,
    ValidationError,
    WrongPortal,
)

UTC = timezone.utc

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# API name -> stored field, per role
PATIENT_FIELDS = {
    "name": "name",
    "phone": "phone",
    "age": "age",
    "weight": "weight",
    "height": "height",
    "allergies": "allergies",
    "medications": "medications",
    "bloodType": "blood_type",
}
PROVIDER_FIELDS = {
    "name": "name",
    "phone": "phone",
    "specialization": "specialization",
    "hospital": "hospital",
    "licenseNumber": "license_number",
    "experience": "experience",
}
FIELDS_BY_ROLE = {PATIENT: PATIENT_FIELDS, PROVIDER: PROVIDER_FIELDS}

REQUIRED = ("name", "email", "phone", "password")
PROVIDER_REQUIRED = ("specialization", "hospital", "licenseNumber")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _oid(raw: Any, what: str = "User") -> ObjectId:
    try:
        return ObjectId(str(raw))
    except (InvalidId, TypeError):
        raise NotFound(f"{what} not found")


# --- lookups -----------------------------------------------------------------
def get_user(store: MongoStore, user_id: str, role: Optional[str] = None) -> dict:
    what = {PATIENT: "Patient", PROVIDER: "Doctor"}.get(role, "User")
    q: Dict[str, Any] = {"_id": _oid(user_id, what)}
    if role:
        q["role"] = role
    user = store.users.find_one(q)
    if not user:
        raise NotFound(f"{what} not found")
    return user


def users_by_ids(store: MongoStore, ids: Iterable[str], role: Optional[str] = None) -> List[dict]:
    oids = []
    for i in ids:
        try:
            oids.append(ObjectId(str(i)))
        except (InvalidId, TypeError):
            continue
    q: Dict[str, Any] = {"_id": {"$in": oids}}
    if role:
        q["role"] = role
    return list(store.users.find(q).sort("name", 1))


def assigned_doctor_ids(store: MongoStore, patient_id: str) -> List[str]:
    cursor = store.assignments.find({"patient_id": str(patient_id)}).sort("created_at", 1)
    return [a["doctor_id"] for a in cursor]


def assigned_patient_ids(store: MongoStore, doctor_id: str) -> List[str]:
    cursor = store.assignments.find({"doctor_id": str(doctor_id)}).sort("created_at", 1)
    return [a["patient_id"] for a in cursor]


# --- views -------------------------------------------------------------------
def recommendation_view(r: dict) -> dict:
    return {
        "doctorId": r.get("doctor_id"),
        "doctorName": r.get("doctor_name"),
        "date": r.get("date"),
        "recommendation": r.get("text"),
        "priority": r.get("priority"),
    }


def public_user(store: MongoStore, user: dict) -> dict:
    """Role-appropriate fields only; the password hash never leaves here."""
    role = user.get("role", PATIENT)
    uid = str(user["_id"])
    out = {"id": uid, "email": user.get("email"), "role": role}
    for api_name, stored in FIELDS_BY_ROLE[role].items():
        default = [] if api_name in ("allergies", "medications") else None
        out[api_name] = user.get(stored, default)

    if role == PATIENT:
        out["assignedDoctorIds"] = assigned_doctor_ids(store, uid)
        out["recommendations"] = [recommendation_view(r) for r in user.get("recommendations", [])]
    else:
        out["assignedPatientIds"] = assigned_patient_ids(store, uid)
    out["createdAt"] = user.get("created_at")
    return out


# --- registration / login ----------------------------------------------------
def register(store: MongoStore, attributes: Dict[str, Any]) -> dict:
    """Create a patient or provider; returns the stored document."""
    role = attributes.get("role") or PATIENT
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    if any(_blank(attributes.get(f)) for f in REQUIRED):
        raise ValidationError("Please enter all required fields: name, email, phone, and password.")
    if role == PROVIDER and any(_blank(attributes.get(f)) for f in PROVIDER_REQUIRED):
        raise ValidationError("Please include specialization, hospital, and license number for doctor registration.")

    email = normalize_email(attributes["email"])
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email address.")
    if store.users.find_one({"email": email}):
        raise DuplicateEmail()

    now = _utcnow()
    doc: Dict[str, Any] = {
        "email": email,
        "password": get_password_hash(attributes["password"]),
        "role": role,
        "privacy_consent": True,
        "created_at": now,
        "updated_at": now,
    }
    for api_name, stored in FIELDS_BY_ROLE[role].items():
        value = attributes.get(api_name)
        if value is not None:
            doc[stored] = value.strip() if isinstance(value, str) else value
    if role == PATIENT:
        doc.setdefault("allergies", [])
        doc.setdefault("medications", [])
        doc["recommendations"] = []

    try:
        result = store.users.insert_one(doc)
    except DuplicateKeyError:
        raise DuplicateEmail()
    doc["_id"] = result.inserted_id
    return doc


def authenticate(store: MongoStore, email: str, password: str, expected_role: Optional[str] = None) -> dict:
    """
    Unknown email and wrong password give the same error so the endpoint
    cannot be used to probe for accounts.
    """
    user = store.users.find_one({"email": normalize_email(email)})
    if not user or not user.get("password") or not verify_password(password or "", user["password"]):
        raise InvalidCredentials()
    if expected_role and user.get("role") != expected_role:
        raise WrongPortal(user.get("role", PATIENT))
    return user


# --- profile -----------------------------------------------------------------
def get_profile(store: MongoStore, caller: dict, role: str) -> dict:
    if role not in ROLES:
        raise NotFound("Profile not found")
    if caller.get("role") != role:
        raise RoleMismatch(f"This account is not a {role} account.")
    return public_user(store, get_user(store, caller["id"], role))


def update_profile(store: MongoStore, caller: dict, role: str, fields: Dict[str, Any]) -> dict:
    """Partial update: only keys present (and not None) in ``fields`` are written."""
    if role not in ROLES:
        raise NotFound("Profile not found")
    if caller.get("role") != role:
        raise RoleMismatch(f"This account is not a {role} account.")

    allowed = FIELDS_BY_ROLE[role]
    unknown = [k for k in fields if k not in allowed]
    if unknown:
        raise ValidationError(f"Fields not editable on a {role} profile: {', '.join(sorted(unknown))}")

    changes = {allowed[k]: v for k, v in fields.items() if v is not None}
    oid = get_user(store, caller["id"], role)["_id"]
    if changes:
        changes["updated_at"] = _utcnow()
        store.users.update_one({"_id": oid}, {"$set": changes})
    return public_user(store, store.users.find_one({"_id": oid}))


# --- assignment --------------------------------------------------------------
def assign(store: MongoStore, patient_id: str, doctor_id: str) -> bool:
    """Idempotent. Returns True when a new assignment was created."""
    patient = get_user(store, patient_id, PATIENT)
    doctor = get_user(store, doctor_id, PROVIDER)
    key = {"patient_id": str(patient["_id"]), "doctor_id": str(doctor["_id"])}
    try:
        res = store.assignments.update_one(key, {"$setOnInsert": {"created_at": _utcnow()}}, upsert=True)
    except DuplicateKeyError:
        return False
    return res.upserted_id is not None


def unassign(store: MongoStore, patient_id: str, doctor_id: str) -> bool:
    """Idempotent. Returns True when an existing assignment was removed."""
    patient = get_user(store, patient_id, PATIENT)
    doctor = get_user(store, doctor_id, PROVIDER)
    res = store.assignments.delete_one({"patient_id": str(patient["_id"]), "doctor_id": str(doctor["_id"])})
    return res.deleted_count == 1


def list_doctors(store: MongoStore, patient_id: str) -> List[dict]:
    assigned = set(assigned_doctor_ids(store, patient_id))
    doctors = store.users.find({"role": PROVIDER}).sort("name", 1)
    return [
        {
            "id": str(d["_id"]),
            "name": d.get("name"),
            "email": d.get("email"),
            "phone": d.get("phone"),
            "specialization": d.get("specialization"),
            "hospital": d.get("hospital"),
            "experience": d.get("experience"),
            "isAssigned": str(d["_id"]) in assigned,
        }
        for d in doctors
    ]


# --- recommendations ---------------------------------------------------------
def add_recommendation(store: MongoStore, doctor: dict, patient_id: str, text: str, priority: str) -> dict:
    """Append to the patient's embedded list; caller has already checked assignment."""
    patient = get_user(store, patient_id, PATIENT)
    if priority not in ("high", "medium", "low"):
        raise ValidationError("priority must be one of: high, medium, low")
    entry = {
        "doctor_id": doctor["id"],
        "doctor_name": doctor.get("name"),
        "date": _utcnow(),
        "text": text,
        "priority": priority,
    }
    store.users.update_one({"_id": patient["_id"]}, {"$push": {"recommendations": entry}})
    return recommendation_view(entry)
