"""
Tests for Voting Strategies
===========================

Tests vote combination and early stopping for the built-in strategies.
"""

import pytest

from rolegate.core.exceptions import InvalidConfigError
from rolegate.core.strategy import (
    ALL_ABSTAINED_MESSAGE,
    NO_VOTES_MESSAGE,
    AllowWinsStrategy,
    DenyWinsStrategy,
    get_strategy,
)
from rolegate.core.vote import VoteResult


ALLOW = VoteResult.allow("allowed")
DENY = VoteResult.deny("denied")
ABSTAIN = VoteResult.abstain("no opinion")


class TestDenyWinsStrategy:
    """Tests for DenyWinsStrategy."""

    @pytest.fixture
    def strategy(self):
        return DenyWinsStrategy()

    def test_no_votes_abstains(self, strategy):
        """An empty vote list should abstain."""
        result = strategy.decide([])
        assert result.is_abstain
        assert result.message == NO_VOTES_MESSAGE

    def test_all_abstain(self, strategy):
        result = strategy.decide([ABSTAIN, ABSTAIN])
        assert result.is_abstain
        assert result.message == ALL_ABSTAINED_MESSAGE

    def test_deny_beats_allow(self, strategy):
        """Any DENY should deny, regardless of position."""
        result = strategy.decide([ALLOW, ABSTAIN, DENY])
        assert result.is_deny
        assert result.message == "Deny wins - denied"

    def test_allow_without_deny(self, strategy):
        result = strategy.decide([ABSTAIN, ALLOW])
        assert result.is_allow
        assert result.message == "No deny votes found - allowed"

    def test_first_deny_message_is_used(self, strategy):
        result = strategy.decide([VoteResult.deny("first"), VoteResult.deny("second")])
        assert result.message == "Deny wins - first"

    def test_should_stop_only_on_deny(self, strategy):
        assert strategy.should_stop_voting(DENY)
        assert not strategy.should_stop_voting(ALLOW)
        assert not strategy.should_stop_voting(ABSTAIN)

    def test_name(self, strategy):
        assert strategy.name == "DenyWinsStrategy"


class TestAllowWinsStrategy:
    """Tests for AllowWinsStrategy."""

    @pytest.fixture
    def strategy(self):
        return AllowWinsStrategy()

    def test_no_votes_abstains(self, strategy):
        assert strategy.decide([]).is_abstain

    def test_all_abstain(self, strategy):
        result = strategy.decide([ABSTAIN])
        assert result.is_abstain
        assert result.message == ALL_ABSTAINED_MESSAGE

    def test_allow_beats_deny(self, strategy):
        """Any ALLOW should allow, regardless of position."""
        result = strategy.decide([DENY, ABSTAIN, ALLOW])
        assert result.is_allow
        assert result.message == "Allow wins - allowed"

    def test_deny_without_allow(self, strategy):
        result = strategy.decide([ABSTAIN, DENY])
        assert result.is_deny
        assert result.message == "No allow votes - denied"

    def test_should_stop_only_on_allow(self, strategy):
        assert strategy.should_stop_voting(ALLOW)
        assert not strategy.should_stop_voting(DENY)
        assert not strategy.should_stop_voting(ABSTAIN)


class TestStrategyRegistry:
    """Tests for strategy lookup by name."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("deny_wins", DenyWinsStrategy),
            ("allow_wins", AllowWinsStrategy),
            ("Allow-Wins", AllowWinsStrategy),
        ],
    )
    def test_lookup(self, name, expected):
        assert isinstance(get_strategy(name), expected)

    def test_unknown_strategy(self):
        """Unknown names should raise a configuration error."""
        with pytest.raises(InvalidConfigError) as exc_info:
            get_strategy("majority")
        assert exc_info.value.code == "UNKNOWN_STRATEGY"
        assert "majority" in str(exc_info.value)
