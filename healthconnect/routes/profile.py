# healthconnect/routes/profile.py
from typing import Any, Dict

import pydantic
from fastapi import APIRouter, Body, Depends

from healthconnect.auth import get_current_user
from healthconnect.db import MongoStore, get_store
from healthconnect.errors import NotFound, ValidationError
from healthconnect.schemas.profile import PatientProfileUpdate, ProviderProfileUpdate
from healthconnect.services import profiles
from healthconnect.utils.logger import log_activity

router = APIRouter(prefix="/profile", tags=["profile"])

UPDATE_MODELS = {"patient": PatientProfileUpdate, "provider": ProviderProfileUpdate}


def _parse_update(role: str, body: Dict[str, Any]) -> Dict[str, Any]:
    model = UPDATE_MODELS.get(role)
    if model is None:
        raise NotFound("Profile not found")
    try:
        parsed = model.model_validate(body)
    except pydantic.ValidationError as e:
        raise ValidationError("; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        ))
    return parsed.model_dump(exclude_unset=True)


@router.get("/{role}")
def read_profile(role: str, current_user: dict = Depends(get_current_user), store: MongoStore = Depends(get_store)):
    return profiles.get_profile(store, current_user, role)


@router.put("/{role}")
def update_profile(
    role: str,
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    store: MongoStore = Depends(get_store),
):
    fields = _parse_update(role, body)
    updated = profiles.update_profile(store, current_user, role, fields)
    log_activity(store, current_user["id"], "update_profile", {"fields": sorted(fields)})
    return {"message": "Profile updated successfully!", "profile": updated}
