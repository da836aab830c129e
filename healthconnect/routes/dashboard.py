# healthconnect/routes/dashboard.py
from fastapi import APIRouter, Depends

from healthconnect import settings
from healthconnect.authz import PATIENT, PROVIDER, require_role
from healthconnect.db import MongoStore, get_store
from healthconnect.services import aggregation, profiles
from healthconnect.services.metrics import utc_today

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/patient")
def patient_dashboard(user=Depends(require_role(PATIENT)), store: MongoStore = Depends(get_store)):
    today = utc_today()
    profile = profiles.get_profile(store, user, PATIENT)
    snapshot = aggregation.today_snapshot(store, user["id"], today)
    series = aggregation.weekly_series(store, user["id"], today)
    return {
        "profile": profile,
        "today": snapshot,
        "progress": aggregation.goal_progress(snapshot),
        "weekly": series,
        "chart": aggregation.weekly_chart(series),
        # newest first for the UI card
        "recommendations": list(reversed(profile["recommendations"])),
        "healthTip": settings.HEALTH_TIP,
    }


@router.get("/doctor")
def doctor_dashboard(user=Depends(require_role(PROVIDER)), store: MongoStore = Depends(get_store)):
    stats = aggregation.doctor_stats(store, user["id"])
    stats["doctor"] = profiles.get_profile(store, user, PROVIDER)
    return stats
