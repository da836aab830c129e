# healthconnect/routes/goals.py
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from healthconnect.auth import get_current_user
from healthconnect.authz import PATIENT, ensure_can_view_patient, require_role
from healthconnect.db import MongoStore, get_store
from healthconnect.schemas.goals import LogValueRequest, SetTargetRequest
from healthconnect.services import metrics
from healthconnect.utils.logger import log_activity

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("/add")
def add_goal(payload: LogValueRequest, user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    record = metrics.log_value(store, user["id"], payload.type, payload.value)
    log_activity(store, user["id"], "log_goal", {"type": payload.type, "value": payload.value})
    return {"message": "Goal updated", "goal": record}


@router.put("/set-target")
def set_target(payload: SetTargetRequest, user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    record = metrics.set_target(store, user["id"], payload.type, payload.target)
    log_activity(store, user["id"], "set_goal_target", {"type": payload.type, "target": payload.target})
    return {"message": "Target updated", "goal": record}


@router.get("/history")
def history(
    from_day: Optional[date] = Query(default=None, alias="from"),
    to_day: Optional[date] = Query(default=None, alias="to"),
    type: Optional[str] = None,
    patient_id: Optional[str] = Query(default=None, alias="patientId"),
    current_user: dict = Depends(get_current_user),
    store: MongoStore = Depends(get_store),
):
    owner = patient_id or current_user["id"]
    ensure_can_view_patient(store, current_user, owner)
    to_day = to_day or metrics.utc_today()
    from_day = from_day or (to_day - timedelta(days=6))
    return metrics.query_range(store, owner, from_day, to_day, type)
