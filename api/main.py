"""
FastAPI REST API for the Preparedness Risk Engine

Provides RESTful endpoints for hazard assessments and strategy recommendations.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
import logging
import sys
import os

# Add src directory to path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from catalog_connectors import connector_from_settings
from risk_scoring import (
    BusinessCharacteristics,
    CatalogUnavailableError,
    NotFoundError,
    RiskEngine,
    RiskEngineError,
    get_settings,
)
from risk_scoring.models import RecommendationResult, RiskAssessmentResult, StrategyRecommendation

settings = get_settings()

logging.basicConfig(level=getattr(logging, settings.log_level))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Preparedness Risk Engine API",
    description="Hazard risk scoring and mitigation strategy recommendations for businesses",
    version="1.0.0"
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize connector
catalog_connector = connector_from_settings(settings)


def load_engine() -> RiskEngine:
    """Fetch a fresh catalog snapshot and build an engine over it"""
    snapshot = catalog_connector.load_snapshot()
    return RiskEngine(snapshot, settings)


# Error handlers

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
    logger.error(f"Catalog unavailable for {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content=exc.to_dict())


@app.exception_handler(RiskEngineError)
async def engine_error_handler(request: Request, exc: RiskEngineError):
    logger.error(f"Engine error for {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=exc.to_dict())


# Pydantic models
class AssessmentInput(BaseModel):
    business_type_id: str = Field(..., min_length=1, description="Catalog business type")
    location_id: Optional[str] = Field(None, description="Catalog location (omit when unknown)")
    characteristics: BusinessCharacteristics = Field(default_factory=BusinessCharacteristics)
    as_of: Optional[date] = Field(None, description="Date for seasonal adjustment (defaults to today)")


class AssessmentResponse(BaseModel):
    business_type_id: str
    location_id: Optional[str]
    risks: List[RiskAssessmentResult]
    active_hazards: List[str]
    as_of: date


class StrategyInput(BaseModel):
    business_type_id: str = Field(..., min_length=1)
    active_hazards: List[str] = Field(..., description="Hazards that were selected")
    characteristics: BusinessCharacteristics = Field(default_factory=BusinessCharacteristics)


class StrategyResponse(BaseModel):
    count: int
    recommendations: List[StrategyRecommendation]
    error: Optional[str]


# API Endpoints

@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "message": "Preparedness Risk Engine API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "risk_assessment": "/api/v1/risk/assess",
            "strategy_recommendations": "/api/v1/strategies/recommend",
            "full_assessment": "/api/v1/assessment",
            "hazards": "/api/v1/catalog/hazards"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "catalog_source": settings.catalog_url or settings.catalog_path,
        "thresholds": {
            "force_preselect_score": settings.force_preselect_score,
            "min_preselect_score": settings.min_preselect_score
        }
    }


@app.post("/api/v1/risk/assess", response_model=AssessmentResponse)
async def assess_risks(assessment: AssessmentInput):
    """
    Assess every hazard linked to a business type at a location

    Returns per-hazard scores, applied multipliers and selection disposition.
    """
    as_of = assessment.as_of or date.today()
    engine = load_engine()
    results = engine.assess_risks(
        assessment.business_type_id,
        assessment.location_id,
        assessment.characteristics,
        as_of
    )

    return AssessmentResponse(
        business_type_id=assessment.business_type_id,
        location_id=assessment.location_id,
        risks=results,
        active_hazards=engine.active_hazards(results),
        as_of=as_of
    )


@app.post("/api/v1/strategies/recommend", response_model=StrategyResponse)
async def recommend_strategies(request: StrategyInput):
    """
    Rank mitigation strategies for the selected hazards

    An empty or unavailable strategy catalog is reported in ``error``.
    """
    engine = load_engine()
    result: RecommendationResult = engine.recommend_strategies(
        request.active_hazards,
        request.characteristics,
        request.business_type_id
    )

    return StrategyResponse(
        count=len(result.recommendations),
        recommendations=list(result.recommendations),
        error=result.error
    )


@app.post("/api/v1/assessment")
async def build_assessment(assessment: AssessmentInput):
    """Run the full pipeline and return the assessment document"""
    engine = load_engine()
    return engine.build_assessment_document(
        assessment.business_type_id,
        assessment.location_id,
        assessment.characteristics,
        assessment.as_of or date.today()
    )


@app.get("/api/v1/catalog/hazards")
async def get_hazards():
    """List hazards in the catalog"""
    snapshot = catalog_connector.load_snapshot()
    hazards = [hazard.model_dump(mode="json") for hazard in snapshot.hazards]
    return {
        "count": len(hazards),
        "hazards": hazards
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
