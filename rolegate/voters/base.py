"""
ROLEGATE - Voter Base Class
===========================

Voters are pluggable decision makers. The gatekeeper consults them in
the configured order; each returns a `VoteResult` for one permission
check.

Voters must not depend on the votes of other voters and should abstain
when they have no opinion about a permission or subject, leaving the
decision to voters further down the stack.

Example:
    class OwnerVoter(Voter):
        def vote(self, user_id, permission, subject=None):
            if getattr(subject, "owner_id", None) is None:
                return VoteResult.abstain("Subject has no owner")
            if subject.owner_id == user_id:
                return VoteResult.allow("User owns the subject")
            return VoteResult.deny("User does not own the subject")

Author: ROLEGATE Development Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Union

from rolegate.core.vote import VoteResult

UserId = Union[str, int]


def permission_name(permission: Any) -> str:
    """
    Coerce a permission to its name.

    Accepts plain strings, str-valued Enum members (e.g. a
    `Permission(str, Enum)`), or anything that renders via str().
    """
    if isinstance(permission, Enum):
        return str(permission.value)
    return str(permission)


class Voter(ABC):
    """Base class for all voters."""

    @property
    def identity(self) -> str:
        """Producer identity recorded in the reason chain."""
        return type(self).__name__

    @abstractmethod
    def vote(self, user_id: UserId, permission: Any, subject: Any = None) -> VoteResult:
        """
        Cast a vote for one permission check.

        Args:
            user_id: The user identifier
            permission: Permission name or string-like object
            subject: Optional subject for context-aware decisions

        Returns:
            ALLOW, DENY or ABSTAIN vote
        """

    def __repr__(self) -> str:
        return f"<{self.identity}>"


__all__ = [
    "UserId",
    "Voter",
    "permission_name",
]
