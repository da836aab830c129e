import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from healthconnect import settings
from healthconnect.db import MongoStore
from healthconnect.db_init import ensure_indexes
from healthconnect.errors import HealthConnectError, StoreFault
from healthconnect.middleware.audit_middleware import AuditMiddleware
from healthconnect.routes import auth, dashboard, doctors, goals, profile

logger = logging.getLogger("healthconnect")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # tests attach their own (mongomock) store before startup
    store = getattr(app.state, "store", None)
    owned = store is None
    if owned:
        store = MongoStore().open()
        app.state.store = store
    ensure_indexes(store)
    try:
        yield
    finally:
        if owned:
            store.close()
            app.state.store = None


app = FastAPI(title="HealthConnect API", lifespan=lifespan)

app.add_middleware(AuditMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(doctors.router)
app.include_router(goals.router)
app.include_router(dashboard.router)


@app.exception_handler(HealthConnectError)
async def domain_error_handler(request: Request, exc: HealthConnectError):
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error("store fault on %s %s: %r", request.method, request.url.path, exc)
    fault = StoreFault(f"Database error: {exc}")
    return JSONResponse({"detail": fault.detail}, status_code=fault.status_code)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.get("/health")
def health():
    return {"status": "ok"}
