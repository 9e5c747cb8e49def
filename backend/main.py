# backend/main.py

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Optional, List
import datetime
import logging
import traceback

from config import get_settings
from database import init_db
from errors import (
    GatewayPlannerError,
    ValidationError,
    ConfigurationUnderflowError,
    UnknownGatewayTypeError,
    UnknownStreamError,
    UnknownGatewayError,
    SessionNotFoundError,
    SessionLimitError,
)
from models import Calculations, GatewayConfiguration
from services import build_log_formatter, configure_planning_logging, get_planning_service
from services.catalog import get_gateway_catalog
from services.export import get_plan_export_service

# Load settings
settings = get_settings()

# Configure logging
LOG_LEVEL = getattr(logging, settings.log_level.upper(), logging.INFO)
_log_handler = logging.StreamHandler()
_log_handler.setFormatter(build_log_formatter(settings.log_format))
logging.basicConfig(level=LOG_LEVEL, handlers=[_log_handler])
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Gateway Planner Backend",
    version="0.1.0",
    description="Camera stream gateway sizing and stream assignment"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


ERROR_STATUS_CODES = {
    SessionNotFoundError: 404,
    UnknownStreamError: 404,
    UnknownGatewayError: 404,
    ConfigurationUnderflowError: 409,
    SessionLimitError: 429,
    UnknownGatewayTypeError: 422,
    ValidationError: 422,
}


def _status_for(exc: GatewayPlannerError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


@app.exception_handler(GatewayPlannerError)
async def planner_exception_handler(request: Request, exc: GatewayPlannerError):
    """Return planner errors as JSON with their recovery hints"""
    status_code = _status_for(exc)
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Global exception handler to ensure errors return proper JSON with CORS headers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return proper JSON response"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": type(exc).__name__,
            "traceback": traceback.format_exc() if settings.debug else None
        }
    )

# ---- Startup event ----

@app.on_event("startup")
async def startup_event():
    """Application startup"""
    configure_planning_logging(LOG_LEVEL, build_log_formatter(settings.log_format))

    logger.info("=" * 60)
    logger.info("Gateway Planner Backend Starting")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Gateway types: {', '.join(get_gateway_catalog().types())}")
    logger.info(f"Persist exports: {settings.persist_exports}")

    # Initialize database
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    logger.info("=" * 60)

# ---- Pydantic models ----

class CameraRecord(BaseModel):
    name: str
    lensCount: int = 1
    streamingResolution: float = 2
    frameRate: int = 10
    recordingResolution: Optional[float] = None
    sameAsStreaming: bool = False
    storageDays: int = 30

class GatewayConfigRecord(BaseModel):
    type: str
    count: int = Field(default=1, ge=1)

    def to_configuration(self) -> GatewayConfiguration:
        return GatewayConfiguration(type=self.type, count=self.count)

class CalculationsRecord(BaseModel):
    totalStreams: int = 0
    totalThroughput: float = 0.0
    totalStorage: float = 0.0

class CalculateRequest(BaseModel):
    cameras: List[CameraRecord]

class CheckConfigurationRequest(BaseModel):
    calculations: CalculationsRecord
    gatewayConfig: GatewayConfigRecord

class CreateSessionRequest(BaseModel):
    cameras: List[CameraRecord]
    gatewayConfig: Optional[GatewayConfigRecord] = None

class PlaceStreamRequest(BaseModel):
    streamId: str
    gatewayId: str

class RemoveStreamRequest(BaseModel):
    streamId: str


# ---- Health check endpoint ----

@app.get("/api/health")
async def health_check():
    """Health check endpoint to verify backend is running"""
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.datetime.utcnow().isoformat() + "Z"
    }


# ---- Sizing endpoints ----

@app.get("/api/gateways/catalog")
def gateway_catalog():
    """List gateway types and their per-unit limits"""
    return {"gatewayTypes": get_gateway_catalog().to_dict()}


@app.post("/api/gateways/calculate")
def calculate_requirements(req: CalculateRequest):
    """Aggregate camera demand and recommend a gateway configuration"""
    planner = get_planning_service()
    calculations, recommendation = planner.calculate(
        [camera.model_dump() for camera in req.cameras]
    )
    check = planner.check(calculations, recommendation)
    return {
        "calculations": calculations.to_dict(),
        "recommendation": recommendation.to_dict(),
        "configurationCheck": check.to_dict(),
    }


@app.post("/api/gateways/check")
def check_configuration(req: CheckConfigurationRequest):
    """Check a user-selected configuration against aggregated demand"""
    planner = get_planning_service()
    calculations = Calculations.from_dict(req.calculations.model_dump())
    return planner.check(calculations, req.gatewayConfig.to_configuration()).to_dict()


# ---- Planning session endpoints ----

@app.post("/api/planning/sessions", status_code=201)
def create_session(req: CreateSessionRequest):
    """Finalize the camera list and open a planning session"""
    planner = get_planning_service()
    session = planner.create_session(
        [camera.model_dump() for camera in req.cameras],
        configuration=req.gatewayConfig.to_configuration() if req.gatewayConfig else None,
    )
    return planner.to_response(session)


@app.get("/api/planning/sessions/{session_id}")
def get_session(session_id: str):
    planner = get_planning_service()
    return planner.to_response(planner.get_session(session_id))


@app.delete("/api/planning/sessions/{session_id}")
def delete_session(session_id: str):
    get_planning_service().delete_session(session_id)
    return {"deleted": session_id}


@app.put("/api/planning/sessions/{session_id}/configuration")
def set_configuration(session_id: str, req: GatewayConfigRecord):
    """Accept or override the gateway configuration (resets assignments)"""
    planner = get_planning_service()
    check = planner.set_configuration(session_id, req.to_configuration())
    response = planner.to_response(planner.get_session(session_id))
    response["configurationCheck"] = check.to_dict()
    return response


@app.post("/api/planning/sessions/{session_id}/place")
def place_stream(session_id: str, req: PlaceStreamRequest):
    """
    Move a stream onto a gateway.

    A placement that would exceed capacity is not an error: the response
    reports ``accepted: false`` and the assignment is unchanged.
    """
    planner = get_planning_service()
    result = planner.place(session_id, req.streamId, req.gatewayId)
    return {
        **result.to_dict(),
        "assignment": result.session.to_dict(),
    }


@app.post("/api/planning/sessions/{session_id}/remove")
def remove_stream(session_id: str, req: RemoveStreamRequest):
    assignment = get_planning_service().remove(session_id, req.streamId)
    return {"assignment": assignment.to_dict()}


@app.post("/api/planning/sessions/{session_id}/auto-assign")
def auto_assign(session_id: str):
    """Automatically assign every stream, keeping camera streams together where possible"""
    planner = get_planning_service()
    assignment, report = planner.auto_assign(session_id)
    return {
        "report": report.to_dict(),
        "assignment": assignment.to_dict(),
    }


@app.post("/api/planning/sessions/{session_id}/clear")
def clear_assignments(session_id: str):
    assignment = get_planning_service().clear(session_id)
    return {"assignment": assignment.to_dict()}


@app.get("/api/planning/sessions/{session_id}/export")
def export_session(session_id: str, persist: Optional[bool] = None):
    """Export the configuration, totals and assignment as a JSON document"""
    return get_planning_service().export(session_id, persist=persist)


# ---- Plan history endpoints ----

@app.get("/api/plans")
def list_plans(session_id: Optional[str] = None, limit: int = 50, offset: int = 0):
    plans = get_plan_export_service().get_history(
        session_id=session_id, limit=limit, offset=offset
    )
    return {"plans": plans, "count": len(plans)}


@app.get("/api/plans/{plan_id}")
def get_plan(plan_id: int):
    plan = get_plan_export_service().get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Plan {plan_id} not found")
    return plan
