# liftlog/main.py
import os
import time
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from liftlog.errors import LiftLogError
from liftlog.routers.auth import router as auth_router
from liftlog.routers.diagnostics import router as diagnostics_router
from liftlog.routers.plan import router as plan_router
from liftlog.routers.sessions import router as sessions_router
from liftlog.routers.sets import router as sets_router
from liftlog.routers.setup import router as setup_router
from liftlog.routers.catalog import router as catalog_router
from liftlog.routers.history import router as history_router
from liftlog.routers.workout import router as workout_router
from liftlog.db import SessionLocal, init_db  # for healthz DB check

log = logging.getLogger("uvicorn")

init_db()

app = FastAPI(
    title="LiftLog API",
    openapi_tags=[
        {"name": "auth", "description": "Google sign-in"},
        {"name": "diagnostics", "description": "Sign-in and spreadsheet checks"},
        {"name": "plan", "description": "Workout plan by day"},
        {"name": "sessions", "description": "Workout sessions"},
        {"name": "sets", "description": "Logged sets"},
        {"name": "exercise-setup", "description": "Per-user exercise defaults"},
        {"name": "exercise-catalog", "description": "Exercise reference data"},
        {"name": "history", "description": "Personal records, last session and trends"},
        {"name": "workout", "description": "Live workout progression"},
    ],
)


# CORS (relax for local dev; tighten origins in prod via env)
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

# Every failure answers with a JSON body the client can parse
@app.exception_handler(LiftLogError)
def liftlog_error(request: Request, exc: LiftLogError):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_payload()),
        headers=exc.headers,
    )

@app.exception_handler(RequestValidationError)
def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "validation_failed", "detail": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(StarletteHTTPException)
def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(Exception)
def unhandled_error(request: Request, exc: Exception):
    error_id = uuid.uuid4().hex[:12]
    log.exception("error_id=%s unhandled error on %s %s", error_id, request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "internal_error", "error_id": error_id})

@app.get("/")
def root():
    return {"ok": True, "name": "LiftLog API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick check of the draft database
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": os.getenv("API_VERSION", "dev")}

# Routers
app.include_router(auth_router)
app.include_router(diagnostics_router)
app.include_router(plan_router)
app.include_router(sessions_router)
app.include_router(sets_router)
app.include_router(setup_router)
app.include_router(catalog_router)
app.include_router(history_router)
app.include_router(workout_router)
