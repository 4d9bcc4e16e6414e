"""
Pydantic request/response models for the pain log API.
Response models mirror the analytics dataclasses, shaped for chart consumption.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from backend.painlog.analytics.entries import PAIN_LEVEL_MAX, PAIN_LEVEL_MIN


class FunctionalImpact(str, Enum):
    """How much pain limited the day."""
    none = "none"
    limited = "limited"
    stopped = "stopped"
    bed = "bed"


class RangeView(str, Enum):
    """Named date ranges for charts and summaries."""
    today = "today"
    week = "week"
    month = "month"
    custom = "custom"


class MedicationItem(BaseModel):
    """Medication with dosage details. Bare names are sent as plain strings."""
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None


MedicationValue = Union[str, MedicationItem]


# =============================================================================
# 1. Pain Logs
# =============================================================================

class PainLogCreate(BaseModel):
    """Request body for POST /logs."""
    model_config = ConfigDict(use_enum_values=True)

    logged_at: Optional[datetime] = Field(None, description="Defaults to now")
    pain_level: Optional[int] = Field(None, ge=PAIN_LEVEL_MIN, le=PAIN_LEVEL_MAX)
    pain_locations: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)
    medications: list[MedicationValue] = Field(default_factory=list)
    notes: Optional[str] = None
    journal_entry: Optional[str] = None
    pain_strategies: Optional[str] = None
    mood: Optional[str] = None
    activity: Optional[str] = None
    weather: Optional[str] = None
    side_effects: Optional[str] = None
    rx_taken: Optional[bool] = None
    functional_impact: Optional[FunctionalImpact] = None
    impact_tags: list[str] = Field(default_factory=list)


class PainLogUpdate(BaseModel):
    """Request body for PATCH /logs/{id}. Only fields sent are changed."""
    model_config = ConfigDict(use_enum_values=True)

    logged_at: Optional[datetime] = None
    pain_level: Optional[int] = Field(None, ge=PAIN_LEVEL_MIN, le=PAIN_LEVEL_MAX)
    pain_locations: Optional[list[str]] = None
    triggers: Optional[list[str]] = None
    medications: Optional[list[MedicationValue]] = None
    notes: Optional[str] = None
    journal_entry: Optional[str] = None
    pain_strategies: Optional[str] = None
    mood: Optional[str] = None
    activity: Optional[str] = None
    weather: Optional[str] = None
    side_effects: Optional[str] = None
    rx_taken: Optional[bool] = None
    functional_impact: Optional[FunctionalImpact] = None
    impact_tags: Optional[list[str]] = None


class PainLog(BaseModel):
    """A stored pain log."""
    id: str
    user_id: str
    logged_at: datetime
    pain_level: Optional[int] = None
    pain_locations: list[str] = []
    triggers: list[str] = []
    medications: list[MedicationValue] = []
    notes: Optional[str] = None
    journal_entry: Optional[str] = None
    pain_strategies: Optional[str] = None
    mood: Optional[str] = None
    activity: Optional[str] = None
    weather: Optional[str] = None
    side_effects: Optional[str] = None
    rx_taken: Optional[bool] = None
    functional_impact: Optional[str] = None
    impact_tags: list[str] = []
    created_at: datetime
    updated_at: datetime


class PainLogListResponse(BaseModel):
    """Response for GET /logs and GET /logs/today."""
    user_id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    logs: list[PainLog]
    count: int


# =============================================================================
# 2. Charts and Patterns
# =============================================================================

class ChartPointModel(BaseModel):
    """Single chart point. notes is only set for single-point mode."""
    x: str
    y: Optional[float] = None
    notes: Optional[str] = None


class ChartResponse(BaseModel):
    """Response for GET /analytics/chart."""
    view: RangeView
    start: datetime
    end: datetime
    mode: str
    days: int
    points: list[ChartPointModel]
    has_data: bool
    empty_message: Optional[str] = None
    count: int


class BucketPointModel(BaseModel):
    label: str
    value: Optional[float] = None
    count: int = 0


class PatternsResponse(BaseModel):
    """Response for GET /analytics/patterns."""
    start: datetime
    end: datetime
    weekday: list[BucketPointModel]
    time_of_day: list[BucketPointModel]
    entry_count: int


# =============================================================================
# 3. Medications, Impact, Summary
# =============================================================================

class MedicationEffect(BaseModel):
    """Effectiveness of one medication. Negative mean_delta = pain went down."""
    name: str
    mean_delta: float
    sample_size: int
    side_effect_rate: Optional[float] = None
    rx_count: int
    total_count: int
    line: str


class MedicationsResponse(BaseModel):
    """Response for GET /analytics/medications."""
    start: datetime
    end: datetime
    medications: list[MedicationEffect]
    count: int


class ImpactTagCount(BaseModel):
    tag: str
    count: int


class FunctionalImpactResponse(BaseModel):
    """Response for GET /analytics/impact."""
    start: datetime
    end: datetime
    has_data: bool
    total_days: int
    pct_limited: float
    pct_stopped: float
    pct_bed: float
    top_tags: list[ImpactTagCount]


class ClinicianSummaryResponse(BaseModel):
    """Response for GET /analytics/summary."""
    start: datetime
    end: datetime
    avg_daily_pain: float
    total_days: int
    severe_days: int
    top_times: list[str]
    top_weekdays: list[str]
    pct_limited: float
    pct_stopped: float
    pct_bed: float
    top_impact_tags: list[str]
    medication_lines: list[str]
    text: str


# =============================================================================
# 4. Profile
# =============================================================================

class ProfileUpdate(BaseModel):
    """Request body for PUT /profile."""
    diagnosis: Optional[str] = None
    default_pain_locations: Optional[list[str]] = None
    pain_is_consistent: Optional[bool] = None
    current_medications: Optional[list[MedicationItem]] = None
    common_triggers: Optional[list[str]] = None


class Profile(BaseModel):
    user_id: str
    diagnosis: Optional[str] = None
    default_pain_locations: list[str] = []
    pain_is_consistent: Optional[bool] = None
    current_medications: list[MedicationItem] = []
    common_triggers: list[str] = []
    updated_at: Optional[datetime] = None


class ConditionDefaultsResponse(BaseModel):
    """Response for GET /profile/condition-defaults."""
    diagnosis: str
    condition: Optional[str] = None
    pain_locations: list[str]
    pain_is_consistent: bool
    common_triggers: list[str]
    description: str
