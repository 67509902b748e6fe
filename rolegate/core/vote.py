"""
ROLEGATE - Vote Results
=======================

Ternary decision value cast by voters and produced by strategies.

A vote is one of ALLOW, DENY or ABSTAIN plus an explanatory message.
ABSTAIN means "no opinion" and defers to the rest of the voter stack.

Author: ROLEGATE Development Team
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from rolegate.voters.base import Voter


class VoteOutcome(str, Enum):
    """Possible voter decisions."""

    ALLOW = "allow"
    DENY = "deny"
    ABSTAIN = "abstain"


DEFAULT_DENY_MESSAGE = "Access denied"


@dataclass(frozen=True)
class VoteResult:
    """
    Result of a single vote.

    Build instances through the named constructors:

        VoteResult.allow("User has role admin")
        VoteResult.deny()
        VoteResult.abstain("No IP provided; abstaining")
    """

    outcome: VoteOutcome
    message: str
    voter: Optional["Voter"] = None

    @classmethod
    def allow(cls, message: str, voter: Optional["Voter"] = None) -> "VoteResult":
        """Create an ALLOW vote."""
        return cls(VoteOutcome.ALLOW, message, voter)

    @classmethod
    def deny(
        cls, message: Optional[str] = DEFAULT_DENY_MESSAGE, voter: Optional["Voter"] = None
    ) -> "VoteResult":
        """Create a DENY vote."""
        return cls(VoteOutcome.DENY, message if message is not None else DEFAULT_DENY_MESSAGE, voter)

    @classmethod
    def abstain(cls, message: str, voter: Optional["Voter"] = None) -> "VoteResult":
        """Create an ABSTAIN vote."""
        return cls(VoteOutcome.ABSTAIN, message, voter)

    @property
    def decision(self) -> str:
        """Outcome as a plain string ("allow", "deny", "abstain")."""
        return self.outcome.value

    @property
    def is_allow(self) -> bool:
        return self.outcome == VoteOutcome.ALLOW

    @property
    def is_deny(self) -> bool:
        return self.outcome == VoteOutcome.DENY

    @property
    def is_abstain(self) -> bool:
        return self.outcome == VoteOutcome.ABSTAIN

    def __str__(self) -> str:
        return f"{self.outcome.value.upper()}: {self.message}"


__all__ = [
    "VoteOutcome",
    "VoteResult",
    "DEFAULT_DENY_MESSAGE",
]
