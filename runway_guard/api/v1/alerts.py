"""GET /v1/alerts and POST /v1/alerts/notify - threshold alerts and their delivery"""

import logging
import time
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request

from runway_guard.api.dependencies import (
    get_dispatcher,
    get_preference_repository,
    get_request_id,
    get_threshold_evaluator,
)
from runway_guard.api.v1.schemas import (
    AlertSchema,
    AlertsResponse,
    NotificationResultSchema,
    NotifyRequest,
    NotifyResponse,
    ThresholdOverrides,
)
from runway_guard.domain.models import ThresholdAlert
from runway_guard.domain.thresholds import ThresholdEvaluator
from runway_guard.infrastructure.database.repositories import NotificationPreferenceRepository
from runway_guard.infrastructure.notifications.dispatcher import NotificationDispatcher
from runway_guard.infrastructure.observability.logging import log_evaluation
from runway_guard.infrastructure.observability.metrics import evaluation_failure_counter, record_alerts

router = APIRouter()


def to_schema(alerts: List[ThresholdAlert]) -> List[AlertSchema]:
    return [
        AlertSchema(
            type=a.type.value,
            title=a.title,
            message=a.message,
            severity=a.severity.value,
            metadata=dict(a.metadata),
        )
        for a in alerts
    ]


def evaluate_thresholds(
    evaluator: ThresholdEvaluator,
    organization_id: str,
    user_id: str,
    request_id: str,
    today: Optional[date] = None,
) -> List[ThresholdAlert]:
    """Run the evaluator and record its outcome in metrics and the structured log"""
    start_time = time.time()
    evaluation = evaluator.evaluate(organization_id, user_id, today)

    if evaluation.partial:
        evaluation_failure_counter.inc()
        logging.error(
            f"Threshold evaluation failed: {evaluation.error}",
            exc_info=evaluation.error,
            extra={
                "request_id": request_id,
                "organization_id": organization_id,
                "user_id": user_id,
                "alerts_collected": len(evaluation.alerts),
            },
        )

    record_alerts(evaluation.alerts)
    log_evaluation(
        organization_id,
        user_id,
        alert_count=len(evaluation.alerts),
        duration_ms=(time.time() - start_time) * 1000,
        partial=evaluation.partial,
        request_id=request_id,
    )
    return evaluation.alerts


def apply_overrides(evaluator: ThresholdEvaluator, overrides: Optional[ThresholdOverrides]) -> None:
    if overrides:
        evaluator.config = evaluator.config.merged(**overrides.model_dump(exclude_none=True))


@router.get("/alerts", response_model=AlertsResponse)
def get_alerts(
    request: Request,
    organization_id: str = Query(..., min_length=1, description="Organization identifier"),
    user_id: str = Query(..., min_length=1, description="User whose bank balances count as cash"),
    runway_warning_months: Optional[float] = Query(None, gt=0),
    runway_critical_months: Optional[float] = Query(None, gt=0),
    evaluator: ThresholdEvaluator = Depends(get_threshold_evaluator),
):
    """
    Evaluate thresholds for display in-app.

    Always 200: evaluation failures degrade to fewer (or no) alerts.
    """
    apply_overrides(
        evaluator,
        ThresholdOverrides(
            runway_warning_months=runway_warning_months,
            runway_critical_months=runway_critical_months,
        ),
    )
    alerts = evaluate_thresholds(evaluator, organization_id, user_id, get_request_id(request))
    return AlertsResponse(organization_id=organization_id, alerts=to_schema(alerts))


@router.post("/alerts/notify", response_model=NotifyResponse)
async def notify_alerts(
    request_body: NotifyRequest,
    request: Request,
    evaluator: ThresholdEvaluator = Depends(get_threshold_evaluator),
    preferences: NotificationPreferenceRepository = Depends(get_preference_repository),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Evaluate thresholds and push alerts to the user's channels.

    Flow:
    1. Evaluate thresholds (never fails, may be empty)
    2. Load the user's notification preferences
    3. Route each alert by severity and deliver per channel
    """
    request_id = get_request_id(request)

    apply_overrides(evaluator, request_body.thresholds)
    alerts = evaluate_thresholds(evaluator, request_body.organization_id, request_body.user_id, request_id)
    if not alerts:
        return NotifyResponse(alerts=[], sent=0, results=[])

    config = preferences.get_config(request_body.user_id)
    if config is None:
        logging.info(
            "No notification preferences; alerts not pushed",
            extra={"request_id": request_id, "user_id": request_body.user_id},
        )
        return NotifyResponse(alerts=to_schema(alerts), sent=0, results=[])

    config.organization_id = request_body.organization_id
    summary = await dispatcher.send_threshold_alerts(config, alerts)

    return NotifyResponse(
        alerts=to_schema(alerts),
        sent=summary.sent,
        results=[NotificationResultSchema(channel=r.channel, success=r.success, error=r.error) for r in summary.results],
    )
