import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from mobile_clinic.core.errors import ClinicError, InternalError, ResourceExhausted
from mobile_clinic.core.policy import allow_all
from mobile_clinic.core.settings import Settings, settings as default_settings, validate_settings
from mobile_clinic.db.session import build_engine, make_session_factory
from mobile_clinic.models import Base
from mobile_clinic.routers.auth import router as auth_router
from mobile_clinic.routers.clinical import router as clinical_router
from mobile_clinic.routers.export import router as export_router
from mobile_clinic.routers.locations import router as locations_router
from mobile_clinic.routers.patients import router as patients_router
from mobile_clinic.routers.pharmacy import router as pharmacy_router
from mobile_clinic.routers.referrals import router as referrals_router
from mobile_clinic.routers.registration import router as registration_router
from mobile_clinic.routers.users import router as users_router
from mobile_clinic.routers.visits import router as visits_router
from mobile_clinic.services.locations import ensure_default_locations

logger = logging.getLogger("mobile_clinic.startup")
error_logger = logging.getLogger("mobile_clinic.errors")


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClinicError)
    async def clinic_error_handler(request: Request, exc: ClinicError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        payload = {"kind": "validation_error", "detail": "Validation failed", "errors": errors}
        return JSONResponse(status_code=400, content=payload)

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
        error_logger.warning("Connection pool exhausted: %s", exc)
        error = ResourceExhausted()
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = request.headers.get("x-request-id")
        error_logger.exception("Unhandled server error", extra={"request_id": request_id})
        payload = InternalError().to_payload()
        if request_id:
            payload["request_id"] = request_id
        if not request.app.state.settings.is_production:
            payload["error"] = str(exc)
        return JSONResponse(status_code=500, content=payload)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or default_settings
    validate_settings(settings)

    app = FastAPI(title="Mobile Clinic API", version="0.1.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine) if engine is not None else None
    app.state.authorization_policy = allow_all

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_exception_handlers(app)

    @app.on_event("startup")
    def startup():
        if app.state.engine is None:
            app.state.engine = build_engine(settings)
            app.state.session_factory = make_session_factory(app.state.engine)
        Base.metadata.create_all(bind=app.state.engine)
        db = app.state.session_factory()
        try:
            created = ensure_default_locations(db, settings.seed_location_names)
            if not created:
                logger.info("Default locations already present.")
        finally:
            db.close()

    @app.on_event("shutdown")
    def shutdown():
        if app.state.engine is not None:
            app.state.engine.dispose()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(locations_router)
    app.include_router(patients_router)
    app.include_router(registration_router)
    app.include_router(visits_router)
    app.include_router(clinical_router)
    app.include_router(referrals_router)
    app.include_router(pharmacy_router)
    app.include_router(export_router)
    return app


app = create_app()


def run() -> None:
    logging.basicConfig(level=logging.INFO)
    uvicorn.run("mobile_clinic.main:app", host="0.0.0.0", port=default_settings.port)
