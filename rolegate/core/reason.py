"""
ROLEGATE - Reason Chain
=======================

Audit trail of a permission check.

Each voter consulted during a check produces one `Reason` entry, and the
gatekeeper appends a final entry carrying the combined decision. Entries
link backwards through `previous`, like chained exceptions, so the head
returned to the caller gives access to the whole history:

    result = gatekeeper.allows("u1", "post:edit")
    for entry in result.reason.walk():
        print(entry)

Author: ROLEGATE Development Team
Version: 1.0.0
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Union

from rolegate.core.subject import format_subject

if TYPE_CHECKING:
    from rolegate.voters.base import Voter


def _decision_value(decision: Union[str, Enum]) -> str:
    if isinstance(decision, Enum):
        return str(decision.value)
    return str(decision)


class Reason:
    """
    One entry of the reason chain.

    `decision` and `message` default to the latest decision recorded with
    `add_decision` when they are not given explicitly.
    """

    def __init__(
        self,
        user_id: Union[str, int],
        permission: str,
        subject: Any = None,
        voter: Optional[str] = None,
        decision: Optional[Union[str, Enum]] = None,
        message: Optional[str] = None,
        previous: Optional["Reason"] = None,
    ):
        self._user_id = user_id
        self._permission = permission
        self._subject = subject
        self._voter = voter
        self._decision = _decision_value(decision) if decision is not None else None
        self._message = message
        self._previous = previous

        self._chain: List[str] = []
        self._last_decision: Optional[str] = None
        self._voters: List["Voter"] = []

    # ------------------------------------------------------------------
    # Read-only attributes
    # ------------------------------------------------------------------

    @property
    def user_id(self) -> Union[str, int]:
        return self._user_id

    @property
    def permission(self) -> str:
        return self._permission

    @property
    def subject(self) -> Any:
        return self._subject

    @property
    def voter(self) -> Optional[str]:
        """Identity of the producer of this entry."""
        return self._voter

    @property
    def previous(self) -> Optional["Reason"]:
        return self._previous

    @property
    def decision(self) -> Optional[str]:
        if self._decision is not None:
            return self._decision
        return self._last_decision

    @property
    def message(self) -> Optional[str]:
        if self._message is not None:
            return self._message
        return self._chain[-1] if self._chain else None

    @property
    def chain(self) -> List[str]:
        """Local decision log of this entry."""
        return list(self._chain)

    @property
    def voters(self) -> List["Voter"]:
        return list(self._voters)

    # ------------------------------------------------------------------
    # Append-only log
    # ------------------------------------------------------------------

    def add_decision(self, decision: Union[str, Enum], message: str) -> "Reason":
        """Record a decision in the local log."""
        value = _decision_value(decision)
        self._last_decision = value
        self._chain.append(f"[{value.upper()}] {message}")
        return self

    def add_voter(self, voter: "Voter") -> "Reason":
        self._voters.append(voter)
        return self

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def _is(self, outcome: str) -> bool:
        return (self.decision or "").lower() == outcome

    @property
    def is_allow(self) -> bool:
        return self._is("allow")

    @property
    def is_deny(self) -> bool:
        return self._is("deny")

    @property
    def is_abstain(self) -> bool:
        return self._is("abstain")

    def walk(self) -> Iterator["Reason"]:
        """Iterate from this entry back to the first one."""
        entry: Optional[Reason] = self
        while entry is not None:
            yield entry
            entry = entry.previous

    @property
    def depth(self) -> int:
        """Number of entries in the chain ending at this entry."""
        return sum(1 for _ in self.walk())

    def trace(self) -> str:
        """Local decision log as text."""
        return "\n".join(self._chain)

    def get_full_trace(self) -> Dict[str, Any]:
        return {
            "chain": self.chain,
            "message": self.message,
            "voters": self.voters,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert this entry to a dictionary for audit storage."""
        return {
            "user_id": self._user_id,
            "permission": self._permission,
            "subject": format_subject(self._subject),
            "voter": self._voter,
            "decision": self.decision,
            "message": self.message,
            "chain": self.chain,
        }

    def history(self) -> List[Dict[str, Any]]:
        """Whole chain as dictionaries, oldest entry first."""
        return [entry.to_dict() for entry in reversed(list(self.walk()))]

    def __str__(self) -> str:
        return (
            f'Permission "{self._permission}" for user "{self._user_id}" was '
            f"{(self.decision or '').lower()} by {self._voter or 'Unknown'}: "
            f"{self.message or 'No message'}"
        )

    def __repr__(self) -> str:
        return f"<Reason {self._voter} {self.decision} {self._permission!r}>"


__all__ = ["Reason"]
