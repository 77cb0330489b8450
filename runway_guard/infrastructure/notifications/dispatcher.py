"""Notification fan-out across channels, filtered by user preferences"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from runway_guard.config import settings
from runway_guard.domain.models import (
    ChannelType,
    DispatchSummary,
    NotificationChannel,
    NotificationConfig,
    NotificationMessage,
    NotificationResult,
    ThresholdAlert,
)
from runway_guard.domain.exceptions import ValidationError
from runway_guard.domain.preferences import RoutingPolicy, meets_min_severity, should_send
from runway_guard.infrastructure.notifications.email import EmailNotifier
from runway_guard.infrastructure.notifications.slack import SlackNotifier
from runway_guard.infrastructure.notifications.sms import SMSNotifier
from runway_guard.infrastructure.observability.logging import log_dispatch
from runway_guard.infrastructure.observability.metrics import record_delivery

FILTERED_ERROR = "Notification filtered by preferences or quiet hours"


class Notifier(Protocol):
    channel: str

    async def send(self, destination: str, message: NotificationMessage) -> NotificationResult:
        ...


class NotificationDispatcher:
    """
    Delivers notifications to a user's channels.

    Channels for a single message are contacted concurrently, each under its
    own timeout; a slow or failing channel only affects its own result.
    Nothing is retried.
    """

    def __init__(
        self,
        notifiers: Dict[ChannelType, Notifier] | None = None,
        policy: RoutingPolicy | None = None,
        timeout: float | None = None,
        action_url: str | None = None,
        default_timezone: str | None = None,
    ):
        self.notifiers = notifiers or {
            ChannelType.EMAIL: EmailNotifier(),
            ChannelType.SLACK: SlackNotifier(),
            ChannelType.SMS: SMSNotifier(),
        }
        self.policy = policy or RoutingPolicy.from_lists(
            settings.route_critical_channels,
            settings.route_warning_channels,
            settings.route_info_channels,
        )
        self.timeout = timeout or settings.notification_timeout_seconds
        self.action_url = action_url or f"{settings.app_base_url}/app"
        self.default_timezone = default_timezone or settings.default_timezone

    def _should_send(
        self,
        config: NotificationConfig,
        message: NotificationMessage,
        now: Optional[datetime],
    ) -> bool:
        """Preference filter; unreadable quiet hours or timezone fall back to the severity check alone"""
        try:
            return should_send(config, message, now, self.default_timezone)
        except ValidationError as e:
            logging.warning(
                f"Ignoring quiet hours for {config.user_id}: {e}",
                extra={"user_id": config.user_id, "step": "notification_filter"},
            )
            return meets_min_severity(config, message.severity)

    async def _dispatch(
        self,
        user_id: str,
        channel: NotificationChannel,
        message: NotificationMessage,
    ) -> NotificationResult:
        channel_name = ChannelType(channel.type).value
        notifier = self.notifiers.get(ChannelType(channel.type))
        start_time = time.time()

        if notifier is None:
            result = NotificationResult(
                channel=channel_name, success=False, error=f"No notifier registered for {channel_name}"
            )
        else:
            try:
                result = await asyncio.wait_for(notifier.send(channel.destination, message), timeout=self.timeout)
            except asyncio.TimeoutError:
                result = NotificationResult(
                    channel=channel_name,
                    success=False,
                    error=f"{channel_name} notification timed out after {self.timeout}s",
                )
            except Exception as e:
                # Notifiers report their own failures; this covers contract violations
                result = NotificationResult(channel=channel_name, success=False, error=str(e) or type(e).__name__)

        record_delivery(channel_name, result.success, time.time() - start_time)
        log_dispatch(user_id, channel_name, result.success, result.error)
        return result

    async def _fan_out(
        self,
        config: NotificationConfig,
        channels: List[NotificationChannel],
        message: NotificationMessage,
    ) -> List[NotificationResult]:
        return list(await asyncio.gather(*(self._dispatch(config.user_id, c, message) for c in channels)))

    async def send_notification(
        self,
        config: NotificationConfig,
        message: NotificationMessage,
        now: Optional[datetime] = None,
    ) -> List[NotificationResult]:
        """Send one message to every enabled channel the user has configured"""
        if not self._should_send(config, message, now):
            return [NotificationResult(channel="all", success=False, error=FILTERED_ERROR)]

        return await self._fan_out(config, config.active_channels(), message)

    async def send_threshold_alerts(
        self,
        config: NotificationConfig,
        alerts: List[ThresholdAlert],
        now: Optional[datetime] = None,
    ) -> DispatchSummary:
        """
        Route each alert to the channels its severity maps to.

        Alerts the user's preferences filter out, or that route to no active
        channel (info by default), produce no results.
        """
        results: List[NotificationResult] = []

        for alert in alerts:
            message = NotificationMessage.from_alert(alert, self.action_url)
            if not self._should_send(config, message, now):
                continue

            channels = self.policy.channels_for(config, alert.severity)
            if channels:
                results.extend(await self._fan_out(config, channels, message))

        return DispatchSummary(sent=sum(1 for r in results if r.success), results=results)
