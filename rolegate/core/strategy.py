"""
ROLEGATE - Voting Strategies
============================

Strategies combine the votes cast for one permission check into a
single final vote, and tell the gatekeeper when further voting cannot
change the outcome.

Built-in strategies:
    - DenyWinsStrategy (default): ABSTAIN < ALLOW < DENY
    - AllowWinsStrategy: ABSTAIN < DENY < ALLOW

Both are fail-secure: when every voter abstains the result is ABSTAIN,
which the gatekeeper reports as "not allowed".

Author: ROLEGATE Development Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Type

from rolegate.core.exceptions import InvalidConfigError
from rolegate.core.vote import VoteResult

NO_VOTES_MESSAGE = "No votes provided"
ALL_ABSTAINED_MESSAGE = "All voters abstained"


class Strategy(ABC):
    """
    Base class for vote combination strategies.

    Implementations must be pure: `decide` and `should_stop_voting` may
    not keep state between calls, so one instance can serve concurrent
    permission checks.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def decide(self, votes: Sequence[VoteResult]) -> VoteResult:
        """Combine the votes into the final decision."""

    @abstractmethod
    def should_stop_voting(self, vote: VoteResult) -> bool:
        """Return True when `vote` settles the outcome on its own."""


class DenyWinsStrategy(Strategy):
    """
    Deny Wins Strategy (default).

    - Any DENY denies access
    - Otherwise any ALLOW grants access
    - All ABSTAIN (or no votes) abstains
    """

    def decide(self, votes: Sequence[VoteResult]) -> VoteResult:
        if not votes:
            return VoteResult.abstain(NO_VOTES_MESSAGE)

        allow_vote: Optional[VoteResult] = None

        for vote in votes:
            if vote.is_deny:
                return VoteResult.deny(f"Deny wins - {vote.message}")
            if vote.is_allow and allow_vote is None:
                allow_vote = vote

        if allow_vote is not None:
            return VoteResult.allow(f"No deny votes found - {allow_vote.message}")

        return VoteResult.abstain(ALL_ABSTAINED_MESSAGE)

    def should_stop_voting(self, vote: VoteResult) -> bool:
        # DENY cannot be overridden
        return vote.is_deny


class AllowWinsStrategy(Strategy):
    """
    Allow Wins Strategy.

    - Any ALLOW grants access
    - Otherwise any DENY denies access
    - All ABSTAIN (or no votes) abstains
    """

    def decide(self, votes: Sequence[VoteResult]) -> VoteResult:
        if not votes:
            return VoteResult.abstain(NO_VOTES_MESSAGE)

        deny_vote: Optional[VoteResult] = None

        for vote in votes:
            if vote.is_allow:
                return VoteResult.allow(f"Allow wins - {vote.message}")
            if vote.is_deny and deny_vote is None:
                deny_vote = vote

        if deny_vote is not None:
            return VoteResult.deny(f"No allow votes - {deny_vote.message}")

        return VoteResult.abstain(ALL_ABSTAINED_MESSAGE)

    def should_stop_voting(self, vote: VoteResult) -> bool:
        # ALLOW cannot be overridden
        return vote.is_allow


STRATEGIES: Dict[str, Type[Strategy]] = {
    "deny_wins": DenyWinsStrategy,
    "allow_wins": AllowWinsStrategy,
}


def get_strategy(name: str) -> Strategy:
    """
    Instantiate a built-in strategy by its configuration name.

    Raises:
        InvalidConfigError: If the name is unknown
    """
    key = name.strip().lower().replace("-", "_")
    strategy_cls = STRATEGIES.get(key)
    if strategy_cls is None:
        raise InvalidConfigError(
            f"Unknown strategy: {name}",
            code="UNKNOWN_STRATEGY",
            details={"available": sorted(STRATEGIES)},
        )
    return strategy_cls()


__all__ = [
    "Strategy",
    "DenyWinsStrategy",
    "AllowWinsStrategy",
    "STRATEGIES",
    "get_strategy",
    "NO_VOTES_MESSAGE",
    "ALL_ABSTAINED_MESSAGE",
]
