"""Notification preference filter - quiet hours, minimum severity, and channel routing"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from runway_guard.domain.exceptions import ValidationError
from runway_guard.domain.models import (
    ChannelType,
    NotificationChannel,
    NotificationConfig,
    NotificationMessage,
    Severity,
)

DEFAULT_TIMEZONE = "America/Los_Angeles"


def parse_hour(value: str) -> int:
    """Hour component of an "HH:MM" (or bare "HH") quiet-hours bound"""
    try:
        hour = int(value.split(":")[0])
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"Invalid quiet hours time: {value!r}") from e
    if not 0 <= hour <= 23:
        raise ValidationError(f"Quiet hours time out of range: {value!r}")
    return hour


def resolve_timezone(name: Optional[str], default: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    try:
        return ZoneInfo(name or default)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name!r}") from e


def hour_in_window(hour: int, start_hour: int, end_hour: int) -> bool:
    """
    True when `hour` falls in [start_hour, end_hour).

    start > end wraps past midnight (22 -> 7 covers 22:00-06:59); start == end
    is an empty window.
    """
    if start_hour < end_hour:
        return start_hour <= hour < end_hour
    if start_hour > end_hour:
        return hour >= start_hour or hour < end_hour
    return False


def is_in_quiet_hours(
    config: NotificationConfig,
    now: Optional[datetime] = None,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> bool:
    """Whether `now`, in the user's timezone, falls inside their quiet hours"""
    prefs = config.preferences
    if not prefs.quiet_hours_start or not prefs.quiet_hours_end:
        return False

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    local_hour = now.astimezone(resolve_timezone(prefs.timezone, default_timezone)).hour
    return hour_in_window(local_hour, parse_hour(prefs.quiet_hours_start), parse_hour(prefs.quiet_hours_end))


def meets_min_severity(config: NotificationConfig, severity: Severity) -> bool:
    return Severity(severity).rank >= Severity(config.preferences.min_severity).rank


def should_send(
    config: NotificationConfig,
    message: NotificationMessage,
    now: Optional[datetime] = None,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> bool:
    """
    Decide whether a message reaches the user at all.

    - below the user's minimum severity: never
    - inside quiet hours: only critical messages
    """
    if not meets_min_severity(config, message.severity):
        return False

    if message.severity != Severity.CRITICAL and is_in_quiet_hours(config, now, default_timezone):
        return False

    return True


@dataclass
class RoutingPolicy:
    """Which channel types receive alerts of each severity"""

    routes: Dict[Severity, FrozenSet[ChannelType]] = field(
        default_factory=lambda: {
            Severity.CRITICAL: frozenset({ChannelType.EMAIL, ChannelType.SLACK, ChannelType.SMS}),
            Severity.WARNING: frozenset({ChannelType.SLACK}),
            Severity.INFO: frozenset(),
        }
    )

    @classmethod
    def from_lists(
        cls,
        critical: Iterable[str],
        warning: Iterable[str],
        info: Iterable[str],
    ) -> "RoutingPolicy":
        try:
            return cls(
                routes={
                    Severity.CRITICAL: frozenset(ChannelType(c) for c in critical),
                    Severity.WARNING: frozenset(ChannelType(c) for c in warning),
                    Severity.INFO: frozenset(ChannelType(c) for c in info),
                }
            )
        except ValueError as e:
            raise ValidationError(f"Unknown channel in routing policy: {e}") from e

    def channels_for(self, config: NotificationConfig, severity: Severity) -> List[NotificationChannel]:
        """User's active channels that this severity is routed to"""
        allowed = self.routes.get(Severity(severity), frozenset())
        return [c for c in config.active_channels() if ChannelType(c.type) in allowed]
