"""
Dashboard - API.

============================================================
RESPONSIBILITY
============================================================
Provides the REST API for the civic risk monitors:

- Crisis early warning (county or national)
- Misinformation detection
- Corruption risk

create_app() is the composition root: it builds (or accepts)
the EarlyWarningService and holds it on app.state.
============================================================
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from early_warning import EarlyWarningService, build_service
from narrative import SUPPORTED_LANGUAGES
from risk_scoring import (
    CRISIS,
    MISINFORMATION,
    AlertLevel,
    RiskScoringConfig,
    RiskScoringError,
    VerificationStatus,
    __version__,
)

from .schemas import (
    CorruptionRequest,
    CredibilityResponse,
    CrisisDescriptionResponse,
    CrisisRequest,
    HealthResponse,
    IndicatorInfo,
    MisinformationDescriptionResponse,
    MisinformationRequest,
    MonitoringResponse,
)

logger = logging.getLogger(__name__)


SERVICE_NAME = "Kenya Civic Risk Monitoring API"
DEGRADED_DETAIL = "monitoring temporarily degraded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# FastAPI Application
# ============================================================

def create_app(
    service: Optional[EarlyWarningService] = None,
    config: Optional[RiskScoringConfig] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        service: Pre-built service (tests inject a mock here)
        config: Configuration used when the service is built here
    """
    owns_service = service is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        persisting = await app.state.service.prepare_storage()
        logger.info(f"Monitoring service ready (persistence={'on' if persisting else 'off'})")
        yield
        if owns_service:
            await app.state.service.close()
            logger.info("Monitoring service closed")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Keyword-indicator risk scoring for crisis, misinformation and corruption monitoring",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = service or build_service(config)
    app.state.started_at = _utcnow()

    @app.exception_handler(RiskScoringError)
    async def risk_scoring_error_handler(request: Request, exc: RiskScoringError):
        # Detail stays in the log, never in the response body
        logger.error(f"Monitoring misconfigured on {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": DEGRADED_DETAIL})

    # ============================================================
    # API Endpoints
    # ============================================================

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "docs": "/docs",
            "endpoints": [
                "/api/crisis-early-warning",
                "/api/misinformation-detector",
                "/api/corruption-risk",
            ],
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        svc: EarlyWarningService = request.app.state.service
        now = _utcnow()
        return HealthResponse(
            status="healthy",
            timestamp=now,
            version=__version__,
            uptime_seconds=(now - request.app.state.started_at).total_seconds(),
            sources=await svc.registry.get_health_summary(),
            recent_incidents=svc.registry.get_incidents(limit=10),
            retrieval=svc.registry.get_stats(),
        )

    # ============================================================
    # Crisis Early Warning
    # ============================================================

    @app.get(
        "/api/crisis-early-warning",
        response_model=CrisisDescriptionResponse,
        tags=["Crisis"],
    )
    async def describe_crisis_monitor(request: Request):
        """System description and monitored indicators."""
        svc: EarlyWarningService = request.app.state.service
        catalog = svc.engine.catalogs.get(CRISIS)
        return CrisisDescriptionResponse(
            service="Crisis Early Warning System",
            description=catalog.description
            or "Monitors political, economic and security indicators for crisis risk",
            catalog_id=catalog.catalog_id,
            catalog_version=catalog.version,
            indicators=[
                IndicatorInfo(
                    name=d.name,
                    weight=d.weight,
                    combination_weight=catalog.combination_weight(d.name),
                    phrase_count=d.phrase_count,
                )
                for d in catalog.indicators
            ],
            monitored_counties=svc.engine.profiles.entity_names,
        )

    @app.post(
        "/api/crisis-early-warning",
        response_model=MonitoringResponse,
        tags=["Crisis"],
    )
    async def crisis_early_warning(body: CrisisRequest, request: Request):
        """Run crisis monitoring for a county or the whole country."""
        svc: EarlyWarningService = request.app.state.service
        result = await svc.monitor_crisis(
            county=body.county or None,
            timeframe=body.timeframe,
            include_preventive_measures=body.include_preventive_measures,
        )
        return result.to_dict()

    # ============================================================
    # Misinformation Detector
    # ============================================================

    @app.get(
        "/api/misinformation-detector",
        response_model=MisinformationDescriptionResponse,
        tags=["Misinformation"],
    )
    async def describe_misinformation_detector(request: Request):
        """System description, patterns and supported languages."""
        svc: EarlyWarningService = request.app.state.service
        catalog = svc.engine.catalogs.get(MISINFORMATION)
        return MisinformationDescriptionResponse(
            service="Misinformation Detection System",
            description=catalog.description
            or "Scores content credibility against misinformation patterns",
            features=[
                "Pattern-based misinformation detection",
                "Source reliability assessment",
                "AI-powered fact verification",
                "Counter-narrative generation",
                "Multi-language support",
                "Risk level assessment",
            ],
            indicators=[d.name for d in catalog.indicators],
            verification_statuses=[s.value for s in VerificationStatus],
            risk_levels=[level.value for level in AlertLevel],
            supported_languages=list(SUPPORTED_LANGUAGES),
        )

    @app.post(
        "/api/misinformation-detector",
        response_model=CredibilityResponse,
        tags=["Misinformation"],
    )
    async def misinformation_detector(body: MisinformationRequest, request: Request):
        """Assess the credibility of one piece of content."""
        if not body.content:
            raise HTTPException(status_code=400, detail="content is required")

        svc: EarlyWarningService = request.app.state.service
        assessment = await svc.detect_misinformation(
            body.content,
            source=body.source,
            language=body.language,
            generate_counter_narrative=body.generate_counter_narrative,
        )
        return {**assessment.to_dict(), "language": body.language}

    # ============================================================
    # Corruption Risk
    # ============================================================

    @app.post(
        "/api/corruption-risk",
        response_model=MonitoringResponse,
        tags=["Corruption"],
    )
    async def corruption_risk(body: CorruptionRequest, request: Request):
        """Assess corruption risk for a named public entity."""
        if not body.entity:
            raise HTTPException(status_code=400, detail="entity is required")

        svc: EarlyWarningService = request.app.state.service
        result = await svc.assess_corruption(body.entity)
        return result.to_dict()

    return app
