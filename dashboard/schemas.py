"""
Pydantic schemas for the monitoring API.
"""
from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

# =======================
# COMMON
# =======================

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    uptime_seconds: float = 0
    sources: Dict[str, Any] = Field(default_factory=dict)
    recent_incidents: List[Dict[str, Any]] = Field(default_factory=list)
    retrieval: Dict[str, Any] = Field(default_factory=dict)


# =======================
# 1. CRISIS EARLY WARNING
# =======================

class CrisisRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    county: Optional[str] = None
    timeframe: str = "24h"
    include_preventive_measures: bool = True

class IndicatorInfo(BaseModel):
    name: str
    weight: float
    combination_weight: float
    phrase_count: int

class CrisisDescriptionResponse(BaseModel):
    service: str
    description: str
    catalog_id: str
    catalog_version: str
    indicators: List[IndicatorInfo]
    monitored_counties: List[str]

class AlertModel(BaseModel):
    level: str  # LOW, MEDIUM, HIGH, CRITICAL
    score: float
    entity_name: str
    indicators: List[str]
    sources: List[str]
    recommendations: List[str]
    timestamp: datetime

class MonitoringResponse(BaseModel):
    alerts: List[AlertModel]
    national_risk_level: str
    narrative: str
    narrative_source: str
    preventive_measures: List[str]
    source_count: int
    generated_at: datetime
    catalog_id: str
    overall: Dict[str, Any]
    message: Optional[str] = None
    monitoring_active: bool = True

# =======================
# 2. MISINFORMATION
# =======================

class MisinformationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = ""
    source: Optional[str] = None
    language: str = "en"  # en, sw, ki, luo
    generate_counter_narrative: bool = True

class CredibilityResponse(BaseModel):
    verification_status: str  # VERIFIED ... FALSE
    confidence_score: float
    risk_level: str
    indicators: List[str]
    pattern_score: float
    source_reliability: float
    fact_check_sources: List[str]
    recommendations: List[str]
    counter_narrative: str = ""
    language: str = "en"

class MisinformationDescriptionResponse(BaseModel):
    service: str
    description: str
    features: List[str]
    indicators: List[str]
    verification_statuses: List[str]
    risk_levels: List[str]
    supported_languages: List[str]

# =======================
# 3. CORRUPTION RISK
# =======================

class CorruptionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    entity: Optional[str] = None
