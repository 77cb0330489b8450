"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import Any, Dict, List, Optional


class ThresholdOverrides(BaseModel):
    """Optional per-request overrides of the default alert thresholds"""

    runway_warning_months: Optional[float] = Field(None, gt=0)
    runway_critical_months: Optional[float] = Field(None, gt=0)
    vendor_spike_threshold: Optional[float] = Field(None, ge=0)
    burn_acceleration_threshold: Optional[float] = Field(None, ge=0)
    large_transaction_threshold: Optional[float] = Field(None, gt=0)


class AlertSchema(BaseModel):
    """Single threshold alert"""

    type: str
    title: str
    message: str
    severity: str
    metadata: Dict[str, Any] = {}


class AlertsResponse(BaseModel):
    """Response for GET /v1/alerts"""

    organization_id: str
    alerts: List[AlertSchema]


class NotifyRequest(BaseModel):
    """Request body for POST /v1/alerts/notify"""

    organization_id: str = Field(..., min_length=1, description="Organization identifier")
    user_id: str = Field(..., min_length=1, description="User whose balances and preferences apply")
    thresholds: Optional[ThresholdOverrides] = None


class NotificationResultSchema(BaseModel):
    channel: str
    success: bool
    error: Optional[str] = None


class NotifyResponse(BaseModel):
    """Response for POST /v1/alerts/notify"""

    alerts: List[AlertSchema]
    sent: int
    results: List[NotificationResultSchema]


class RunwayResponse(BaseModel):
    """Response for GET /v1/metrics/runway"""

    organization_id: str
    current_cash: float
    gross_burn: float
    net_burn: float
    revenue: float
    payroll: float
    runway_months: Optional[float] = None  # null when indefinite
    indefinite: bool
    zero_date: Optional[date] = None


class DigestResponse(BaseModel):
    """Response for GET /v1/digest/preview"""

    subject: str
    body: str
    html: str
