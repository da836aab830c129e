# healthconnect/routes/doctors.py
from fastapi import APIRouter, Depends

from healthconnect.authz import PATIENT, PROVIDER, ensure_assigned, require_role
from healthconnect.db import MongoStore, get_store
from healthconnect.schemas.doctors import AssignRequest
from healthconnect.schemas.profile import RecommendationRequest
from healthconnect.services import aggregation, profiles
from healthconnect.services.metrics import utc_today
from healthconnect.utils.logger import log_activity

router = APIRouter(prefix="/doctors", tags=["doctors"])


# ---------- patient side ----------
@router.get("/list")
def list_doctors(user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    return profiles.list_doctors(store, user["id"])


@router.post("/assign")
def assign_doctor(payload: AssignRequest, user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    created = profiles.assign(store, user["id"], payload.doctorId)
    if created:
        log_activity(store, user["id"], "assign_doctor", {"doctor_id": payload.doctorId})
    return {
        "message": "Doctor assigned successfully" if created else "Doctor already assigned",
        "assignedDoctorIds": profiles.assigned_doctor_ids(store, user["id"]),
    }


@router.post("/unassign")
def unassign_doctor(payload: AssignRequest, user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    removed = profiles.unassign(store, user["id"], payload.doctorId)
    if removed:
        log_activity(store, user["id"], "unassign_doctor", {"doctor_id": payload.doctorId})
    return {
        "message": "Doctor unassigned successfully" if removed else "Doctor was not assigned",
        "assignedDoctorIds": profiles.assigned_doctor_ids(store, user["id"]),
    }


# ---------- provider side ----------
@router.get("/patients")
def my_patients(user=Depends(require_role(PROVIDER)), store: MongoStore = Depends(get_store)):
    return aggregation.doctor_stats(store, user["id"])["patients"]


@router.get("/patient/{patient_id}")
def patient_detail(patient_id: str, user=Depends(require_role(PROVIDER)), store: MongoStore = Depends(get_store)):
    # checked on every read, whatever id the client sends
    ensure_assigned(store, user["id"], patient_id)
    patient = profiles.get_user(store, patient_id, PATIENT)
    today = utc_today()
    series = aggregation.weekly_series(store, patient_id, today)
    snapshot = aggregation.today_snapshot(store, patient_id, today)
    return {
        "profile": profiles.public_user(store, patient),
        "today": snapshot,
        "progress": aggregation.goal_progress(snapshot),
        "weekly": series,
        "chart": aggregation.weekly_chart(series),
    }


@router.post("/patient/{patient_id}/recommendations", status_code=201)
def add_recommendation(
    patient_id: str,
    payload: RecommendationRequest,
    user=Depends(require_role(PROVIDER)),
    store: MongoStore = Depends(get_store),
):
    ensure_assigned(store, user["id"], patient_id)
    rec = profiles.add_recommendation(store, user, patient_id, payload.recommendation, payload.priority)
    log_activity(store, user["id"], "add_recommendation", {"patient_id": patient_id, "priority": payload.priority})
    return rec
