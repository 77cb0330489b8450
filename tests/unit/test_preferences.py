"""Unit tests for quiet hours, severity filtering and channel routing"""

import pytest
from datetime import datetime, timezone
from runway_guard.domain.exceptions import ValidationError
from runway_guard.domain.models import (
    ChannelType,
    NotificationChannel,
    NotificationConfig,
    NotificationMessage,
    NotificationPreferences,
    Severity,
)
from runway_guard.domain.preferences import (
    RoutingPolicy,
    hour_in_window,
    is_in_quiet_hours,
    should_send,
)


def make_config(min_severity=Severity.INFO, start="22:00", end="07:00", tz="UTC", channels=None):
    return NotificationConfig(
        user_id="user_1",
        channels=channels or [],
        preferences=NotificationPreferences(
            min_severity=min_severity,
            quiet_hours_start=start,
            quiet_hours_end=end,
            timezone=tz,
        ),
    )


def at_utc(hour: int) -> datetime:
    return datetime(2025, 6, 15, hour, 30, tzinfo=timezone.utc)


def message(severity: Severity) -> NotificationMessage:
    return NotificationMessage(title="Runway", body="Runway is short", severity=severity)


@pytest.mark.parametrize("hour,expected", [(23, True), (3, True), (22, True), (7, False), (12, False)])
def test_overnight_quiet_hours(hour, expected):
    assert is_in_quiet_hours(make_config(), at_utc(hour)) is expected


def test_same_day_quiet_hours():
    config = make_config(start="12:00", end="14:00")
    assert is_in_quiet_hours(config, at_utc(13))
    assert not is_in_quiet_hours(config, at_utc(14))
    assert not is_in_quiet_hours(config, at_utc(11))


def test_quiet_hours_evaluated_in_user_timezone():
    config = make_config(tz="America/New_York")  # UTC-4 in June
    assert is_in_quiet_hours(config, at_utc(3))  # 23:30 local
    assert not is_in_quiet_hours(config, at_utc(16))  # 12:30 local


def test_no_quiet_hours_configured():
    assert not is_in_quiet_hours(make_config(start=None, end=None), at_utc(3))
    assert not is_in_quiet_hours(make_config(start="22:00", end=None), at_utc(23))


def test_equal_start_and_end_is_empty_window():
    assert not hour_in_window(9, 9, 9)
    assert not hour_in_window(3, 9, 9)


def test_invalid_quiet_hours_rejected():
    with pytest.raises(ValidationError):
        is_in_quiet_hours(make_config(start="25:00"), at_utc(3))
    with pytest.raises(ValidationError):
        is_in_quiet_hours(make_config(tz="Mars/Olympus_Mons"), at_utc(3))


def test_critical_bypasses_quiet_hours():
    config = make_config()
    assert should_send(config, message(Severity.CRITICAL), at_utc(3))
    assert not should_send(config, message(Severity.WARNING), at_utc(3))
    assert should_send(config, message(Severity.WARNING), at_utc(12))


def test_min_severity_filters_lower_severities():
    config = make_config(min_severity=Severity.WARNING, start=None, end=None)
    assert not should_send(config, message(Severity.INFO), at_utc(12))
    assert should_send(config, message(Severity.WARNING), at_utc(12))
    assert should_send(config, message(Severity.CRITICAL), at_utc(12))


def test_critical_below_min_severity_is_impossible():
    config = make_config(min_severity=Severity.CRITICAL, start=None, end=None)
    assert not should_send(config, message(Severity.WARNING), at_utc(12))
    assert should_send(config, message(Severity.CRITICAL), at_utc(12))


def full_channels():
    return [
        NotificationChannel(type=ChannelType.EMAIL, enabled=True, destination="cfo@example.com"),
        NotificationChannel(type=ChannelType.SLACK, enabled=True, destination="https://hooks.slack.test/x"),
        NotificationChannel(type=ChannelType.SMS, enabled=True, destination="+15550100"),
    ]


def test_default_routing_policy():
    config = make_config(channels=full_channels())
    policy = RoutingPolicy()

    assert {c.type for c in policy.channels_for(config, Severity.CRITICAL)} == set(ChannelType)
    assert [c.type for c in policy.channels_for(config, Severity.WARNING)] == [ChannelType.SLACK]
    assert policy.channels_for(config, Severity.INFO) == []


def test_routing_skips_disabled_and_unconfigured_channels():
    channels = full_channels()
    channels[1].enabled = False
    channels[2].destination = None
    config = make_config(channels=channels)

    routed = RoutingPolicy().channels_for(config, Severity.CRITICAL)
    assert [c.type for c in routed] == [ChannelType.EMAIL]


def test_routing_policy_from_lists():
    policy = RoutingPolicy.from_lists(critical=["email", "slack"], warning=["slack", "email"], info=["slack"])
    config = make_config(channels=full_channels())

    assert {c.type for c in policy.channels_for(config, Severity.WARNING)} == {ChannelType.SLACK, ChannelType.EMAIL}
    assert [c.type for c in policy.channels_for(config, Severity.INFO)] == [ChannelType.SLACK]

    with pytest.raises(ValidationError):
        RoutingPolicy.from_lists(critical=["pager"], warning=[], info=[])
