"""
Dictation Engine - FastAPI Main Application
"""

import time
import traceback
import uuid
from collections import OrderedDict
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, List

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from app.config import settings, WorkflowType
from app.core.logging import setup_logging, get_logger, audit_logger
from app.models.requests import (
    TranscriptRequest, MatchLabelRequest, NormalizeRequest,
    SessionCreateRequest, SessionTranscriptRequest
)
from app.models.responses import (
    HealthCheckResponse, ErrorResponse, RateLimitResponse, ParseResult,
    SegmentationResult, LabelMatchResponse, NormalizeResponse, WorkflowDescription,
    FieldDescription, SessionResponse, SessionUpdateResponse
)
from app.services.autofill import AutoFillOrchestrator
from app.services.field_catalog import WORKFLOW_MAPPINGS
from app.services.label_matcher import match_field_label
from app.services.normalizer import fix_medical_transcript, normalize_medical_term, parse_number_phrase
from app.services.parse_service import parse_transcript
from app.services.segmenter import segment_transcript

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Prometheus metrics
request_count = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
request_duration = Histogram('http_request_duration_seconds', 'HTTP request duration')
extraction_duration = Histogram('extraction_duration_seconds', 'Transcript extraction duration')
autofill_updates = Counter('autofill_updates_total', 'Fields emitted by auto-fill passes', ['workflow_type'])

# Rate limiter
limiter = Limiter(key_func=get_remote_address)

# Open documentation sessions, oldest first
sessions: "OrderedDict[str, AutoFillOrchestrator]" = OrderedDict()

START_TIME = time.time()

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

RATE_LIMIT = f"{settings.rate_limit_requests}/{settings.rate_limit_window} seconds"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("🚀 Dictation Engine starting...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"API Version: {settings.api_version}")

    yield

    # Shutdown
    sessions.clear()
    logger.info("🛑 Dictation Engine shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


# Middleware for security headers
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    if "Strict-Transport-Security" not in response.headers:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    if "X-Content-Type-Options" not in response.headers:
        response.headers["X-Content-Type-Options"] = "nosniff"
    if "X-Frame-Options" not in response.headers:
        response.headers["X-Frame-Options"] = "DENY"
    return response


# Middleware for request tracking and metrics
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Request tracking and Prometheus metrics"""

    start_time = time.time()
    request_id = str(uuid.uuid4())

    # Add request ID and start time to state
    request.state.request_id = request_id
    request.state.start_time = start_time

    try:
        response = await call_next(request)

        # Update metrics
        duration = time.time() - start_time
        request_count.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        request_duration.observe(duration)

        # Set response headers
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{duration:.3f}s"

        return response

    except Exception as e:
        request_count.labels(
            method=request.method,
            endpoint=request.url.path,
            status=500
        ).inc()

        logger.error(f"Request {request_id} failed: {e}")
        audit_logger.log_error(request_id, type(e).__name__, str(e), traceback.format_exc())

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An internal error occurred",
                "request_id": request_id,
                "timestamp": datetime.utcnow().isoformat()
            },
            headers={"X-Request-ID": request_id}
        )


def _get_session(session_id: str) -> AutoFillOrchestrator:
    orchestrator = sessions.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")
    return orchestrator


def _session_response(session_id: str, orchestrator: AutoFillOrchestrator) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        workflow_type=orchestrator.workflow_type,
        processed_length=len(orchestrator.processed_transcript),
    )


# Health check endpoint
@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Service health check"""

    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=settings.api_version,
        uptime_seconds=int(time.time() - START_TIME),
        details={"workflows": len(WORKFLOW_MAPPINGS), "active_sessions": len(sessions)},
    )


# Prometheus metrics endpoint
@app.get(settings.metrics_path)
async def metrics():
    """Prometheus metrics"""
    if not settings.enable_metrics:
        raise HTTPException(status_code=404, detail="Metrics disabled")

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/v1/workflows", response_model=List[WorkflowDescription])
async def list_workflows():
    """Field catalog of every documentation workflow"""
    return [
        WorkflowDescription(
            workflow_type=workflow_type,
            fields=[
                FieldDescription(
                    field_key=mapping.field_key,
                    kind=mapping.kind,
                    default=mapping.form_default,
                    primary_labels=list(mapping.primary_labels),
                    aliases=list(mapping.aliases),
                    medical_terms=list(mapping.medical_terms),
                )
                for mapping in mappings
            ],
        )
        for workflow_type, mappings in WORKFLOW_MAPPINGS.items()
    ]


@app.post("/v1/parse", response_model=ParseResult, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def parse(request: Request, body: TranscriptRequest):
    """Extract structured data from a full transcript"""
    with extraction_duration.time():
        result = parse_transcript(body.transcript, body.workflow_type, reference_time=body.reference_time)

    audit_logger.log_extraction_pass(
        workflow_type=body.workflow_type.value,
        transcript_length=len(body.transcript),
        fields_extracted=list(result.structured_data),
        needs_review=result.needs_review,
        request_id=request.state.request_id,
    )
    return result


@app.post("/v1/segment", response_model=SegmentationResult, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def segment(request: Request, body: TranscriptRequest):
    """Split a transcript into per-field content by spoken labels"""
    return segment_transcript(body.transcript, body.workflow_type)


@app.post("/v1/match-label", response_model=LabelMatchResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def match_label(request: Request, body: MatchLabelRequest):
    """Match one spoken field label to a field key"""
    return LabelMatchResponse(match=match_field_label(body.spoken_text, body.workflow_type, body.threshold))


@app.post("/v1/normalize", response_model=NormalizeResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def normalize(request: Request, body: NormalizeRequest):
    """Post-recognition cleanup, abbreviation normalization and number reading"""
    return NormalizeResponse(
        text=body.text,
        cleaned=fix_medical_transcript(body.text),
        normalized_term=normalize_medical_term(body.text),
        number=parse_number_phrase(body.text),
    )


@app.post(
    "/v1/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@limiter.limit(RATE_LIMIT)
async def create_session(request: Request, body: SessionCreateRequest):
    """Open a documentation session with its own processing cursor"""
    session_id = str(uuid.uuid4())

    while len(sessions) >= settings.max_sessions:
        evicted_id, _ = sessions.popitem(last=False)
        logger.warning(f"Session limit reached, evicted session {evicted_id}")

    sessions[session_id] = AutoFillOrchestrator(body.workflow_type, session_id=session_id)
    logger.info(f"Session {session_id} opened for {body.workflow_type.value}")
    return _session_response(session_id, sessions[session_id])


@app.post("/v1/sessions/{session_id}/transcript", response_model=SessionUpdateResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def update_session_transcript(request: Request, session_id: str, body: SessionTranscriptRequest):
    """Run one auto-fill pass for a transcript change"""
    orchestrator = _get_session(session_id)
    if body.workflow_type is not None:
        orchestrator.set_workflow_type(body.workflow_type)

    with extraction_duration.time():
        result = orchestrator.process(
            body.transcript,
            body.current_form_data,
            reference_time=body.reference_time,
        )

    if result is not None and result.updates:
        autofill_updates.labels(workflow_type=orchestrator.workflow_type.value).inc(len(result.updates))

    return SessionUpdateResponse(session_id=session_id, processed=result is not None, result=result)


@app.post("/v1/sessions/{session_id}/reset", response_model=SessionResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def reset_session(request: Request, session_id: str):
    """Clear the processing cursor (the "Clear" action)"""
    orchestrator = _get_session(session_id)
    orchestrator.reset()
    return _session_response(session_id, orchestrator)


@app.delete("/v1/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def close_session(request: Request, session_id: str):
    """Close a documentation session"""
    _get_session(session_id)
    del sessions[session_id]
    logger.info(f"Session {session_id} closed")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Error envelope for HTTP errors
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Wraps HTTP errors in the standard error response"""

    request_id = getattr(request.state, 'request_id', 'unknown')
    error_names: Dict[int, str] = {
        404: "not_found",
        405: "method_not_allowed",
    }
    response = ErrorResponse(
        error=error_names.get(exc.status_code, "http_error"),
        message=str(exc.detail),
        request_id=request_id,
        timestamp=datetime.utcnow(),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


# Request validation errors in the standard envelope
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Wraps request validation errors in the standard error response"""

    request_id = getattr(request.state, 'request_id', 'unknown')
    response = ErrorResponse(
        error="validation_error",
        message="Request body failed validation",
        details={"errors": jsonable_encoder(exc.errors())},
        request_id=request_id,
        timestamp=datetime.utcnow(),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response.model_dump(mode="json"),
    )


# Override rate limit handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Custom rate limit error handler"""

    response = RateLimitResponse(
        message="Too many requests. Please try again later.",
        retry_after=settings.rate_limit_window,
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window,
        timestamp=datetime.utcnow()
    )

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=response.model_dump(mode="json"),
        headers={"Retry-After": str(settings.rate_limit_window)}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""

    request_id = getattr(request.state, 'request_id', 'unknown')

    logger.error(f"Unhandled error in request {request_id}: {exc}")
    logger.error(f"Stacktrace: {traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "request_id": request_id,
            "timestamp": datetime.utcnow().isoformat()
        },
        headers={"X-Request-ID": request_id}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
