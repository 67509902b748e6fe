"""
Tests for the Example Voters
============================

Tests the IP address and time window voters.
"""

from datetime import datetime, timezone

import pytest

from rolegate.voters.ip_address import IpAddressVoter
from rolegate.voters.time_based import TimeBasedVoter, parse_time


def at(hour: int, minute: int = 0):
    """Clock fixed at the given UTC time."""
    return lambda: datetime(2024, 6, 3, hour, minute, tzinfo=timezone.utc)


class TestIpAddressVoter:
    """Tests for IpAddressVoter."""

    @pytest.fixture
    def voter(self):
        return IpAddressVoter(["192.168.1.10", "10.0.0.0/8", "2001:db8::/32"])

    @pytest.mark.parametrize("subject", [None, "", 42, ["10.0.0.1"]])
    def test_abstains_without_ip(self, voter, subject):
        vote = voter.vote("u1", "admin:access", subject)
        assert vote.is_abstain
        assert vote.message == "No IP provided; abstaining"

    def test_exact_match(self, voter):
        vote = voter.vote("u1", "admin:access", "192.168.1.10")
        assert vote.is_allow
        assert vote.message == "IP 192.168.1.10 is allowed by rule 192.168.1.10"

    def test_cidr_match(self, voter):
        vote = voter.vote("u1", "admin:access", "10.20.30.40")
        assert vote.is_allow
        assert "10.0.0.0/8" in vote.message

    def test_ipv6_cidr_match(self, voter):
        assert voter.vote("u1", "admin:access", "2001:db8::1").is_allow

    def test_not_listed_is_denied(self, voter):
        vote = voter.vote("u1", "admin:access", "172.16.0.1")
        assert vote.is_deny
        assert vote.message == "IP 172.16.0.1 is not in allowed list"

    def test_malformed_ip_is_denied(self, voter):
        assert voter.vote("u1", "admin:access", "not-an-ip").is_deny

    def test_malformed_rule_never_matches(self):
        voter = IpAddressVoter(["10.0.0.0/99"])
        assert voter.vote("u1", "p", "10.0.0.1").is_deny

    def test_exact_rule_does_not_match_prefix(self):
        voter = IpAddressVoter(["10.0.0.1"])
        assert voter.vote("u1", "p", "10.0.0.10").is_deny


class TestTimeBasedVoter:
    """Tests for TimeBasedVoter."""

    def test_inside_window(self):
        vote = TimeBasedVoter(clock=at(12)).vote("u1", "p")
        assert vote.is_allow
        assert vote.message == (
            "Access granted during business hours (09:00-17:00). Current: 12:00"
        )

    def test_outside_window(self):
        vote = TimeBasedVoter(clock=at(20)).vote("u1", "p")
        assert vote.is_deny
        assert vote.message == (
            "Access denied outside business hours (09:00-17:00). Current: 20:00"
        )

    @pytest.mark.parametrize("hour,minute", [(9, 0), (17, 0)])
    def test_window_is_inclusive(self, hour, minute):
        assert TimeBasedVoter(clock=at(hour, minute)).vote("u1", "p").is_allow

    def test_just_after_window(self):
        assert TimeBasedVoter(clock=at(17, 1)).vote("u1", "p").is_deny

    @pytest.mark.parametrize("hour,allowed", [(23, True), (3, True), (6, True), (12, False)])
    def test_window_crossing_midnight(self, hour, allowed):
        voter = TimeBasedVoter(clock=at(hour), start_time="22:00", end_time="06:00")
        assert voter.vote("u1", "p").is_allow is allowed

    def test_timezone_is_applied(self):
        """08:00 UTC is 10:00 in Berlin during summer time."""
        voter = TimeBasedVoter(clock=at(8), timezone="Europe/Berlin")
        vote = voter.vote("u1", "p")
        assert vote.is_allow
        assert vote.message.endswith("Current: 10:00")

    def test_ignores_subject_and_permission(self):
        voter = TimeBasedVoter(clock=at(12))
        assert voter.vote(1, "anything", object()).is_allow


class TestParseTime:
    """Tests for HH:MM parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("09:30", (9, 30)), ("9:05", (9, 5)), ("23:59", (23, 59)), ("00:00", (0, 0))],
    )
    def test_valid(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["", "24:00", "12:60", "noon", "12-30"])
    def test_malformed_falls_back_to_midnight(self, value):
        assert parse_time(value) == (0, 0)
