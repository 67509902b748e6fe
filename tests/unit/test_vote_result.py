"""
Tests for Vote Results
======================
"""

import pytest

from rolegate.core.vote import DEFAULT_DENY_MESSAGE, VoteOutcome, VoteResult


class TestConstructors:
    """Tests for the named constructors."""

    def test_allow(self):
        """allow() should carry the ALLOW outcome and message."""
        vote = VoteResult.allow("User has role admin")
        assert vote.outcome == VoteOutcome.ALLOW
        assert vote.message == "User has role admin"
        assert vote.is_allow
        assert not vote.is_deny
        assert not vote.is_abstain

    def test_deny_default_message(self):
        """deny() without a message should use the default."""
        assert VoteResult.deny().message == DEFAULT_DENY_MESSAGE
        assert VoteResult.deny(None).message == "Access denied"

    def test_deny_custom_message(self):
        vote = VoteResult.deny("Nope")
        assert vote.is_deny
        assert vote.message == "Nope"

    def test_abstain(self):
        vote = VoteResult.abstain("No opinion")
        assert vote.is_abstain
        assert vote.decision == "abstain"


class TestValueSemantics:
    """Tests for immutability and rendering."""

    def test_vote_is_immutable(self):
        """Votes should be frozen."""
        vote = VoteResult.allow("ok")
        with pytest.raises(AttributeError):
            vote.message = "changed"

    def test_equal_votes_compare_equal(self):
        assert VoteResult.allow("ok") == VoteResult.allow("ok")
        assert VoteResult.allow("ok") != VoteResult.deny("ok")

    def test_str(self):
        assert str(VoteResult.deny("blocked")) == "DENY: blocked"

    def test_outcome_is_string_enum(self):
        """Outcomes should compare equal to their lowercase names."""
        assert VoteOutcome.ALLOW == "allow"
        assert VoteResult.allow("x").decision == "allow"
