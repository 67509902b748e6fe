"""
ROLEGATE - Gatekeeper
=====================

Entry point for permission checks.

The gatekeeper runs the configured voter stack in order, stops as soon
as the strategy says a vote settles the outcome, combines the votes it
collected and returns the verdict together with the reason chain.

    gatekeeper = Gatekeeper(config)

    result = gatekeeper.allows("user123", "post:edit", post)
    if result:
        ...

    allowed, reason = gatekeeper.allows("user123", "post:delete")
    print(reason)

ABSTAIN is reported as "not allowed". Only misconfiguration raises.

Author: ROLEGATE Development Team
Version: 1.0.0
"""

import logging
import sys
import time
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

from rolegate.core.configuration import Configuration
from rolegate.core.exceptions import ConfigurationError
from rolegate.core.reason import Reason
from rolegate.core.subject import format_subject
from rolegate.core.vote import VoteResult
from rolegate.voters.base import UserId, permission_name

LOG_CONTEXT_KEY = "permission_check"


@dataclass(frozen=True)
class AccessResult:
    """Outcome of a check: a boolean plus the head of the reason chain."""

    allowed: bool
    reason: Reason

    def __bool__(self) -> bool:
        return self.allowed

    def __iter__(self) -> Iterator[Union[bool, Reason]]:
        yield self.allowed
        yield self.reason


class Gatekeeper:
    """
    Permission decision facade.

    Raises:
        ConfigurationError: At construction when no voters are configured
    """

    def __init__(self, configuration: Configuration):
        if configuration.voter_count == 0:
            raise ConfigurationError(
                "No voters configured - the gatekeeper requires at least one voter",
                code="NO_VOTERS",
            )

        self._voters = configuration.voters
        self._strategy = configuration.strategy
        self._logger = configuration.logger

    @property
    def identity(self) -> str:
        return type(self).__name__

    @property
    def strategy_name(self) -> str:
        return self._strategy.name

    def allows(self, user_id: UserId, permission: Any, subject: Any = None) -> AccessResult:
        """
        Check if a user is allowed to perform an action.

        Args:
            user_id: The user identifier
            permission: Permission name or string-like object
            subject: Optional subject for context-aware voters

        Returns:
            AccessResult; truthy when allowed
        """
        start_time = time.perf_counter()
        name = permission_name(permission)

        votes: List[VoteResult] = []
        voter_decisions: List[Dict[str, str]] = []
        reason: Optional[Reason] = None

        for voter in self._voters:
            vote = voter.vote(user_id, permission, subject)
            votes.append(vote)

            voter_decisions.append({
                "voter": voter.identity,
                "decision": vote.decision,
                "message": vote.message,
            })

            self._emit(
                logging.DEBUG,
                f"Voter decision: {voter.identity} {vote.decision}",
                {
                    "user_id": user_id,
                    "permission": name,
                    "voter": voter.identity,
                    "decision": vote.decision,
                    "message": vote.message,
                },
            )

            reason = Reason(
                user_id=user_id,
                permission=name,
                subject=subject,
                voter=voter.identity,
                previous=reason,
            )
            reason.add_decision(vote.outcome, vote.message)
            reason.add_voter(voter)

            if self._strategy.should_stop_voting(vote):
                break

        final = self._strategy.decide(votes)

        reason = Reason(
            user_id=user_id,
            permission=name,
            subject=subject,
            voter=self.identity,
            previous=reason,
        )
        reason.add_decision(final.outcome, final.message)

        allowed = final.is_allow
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        self._emit(
            logging.INFO if allowed else logging.WARNING,
            "Permission check completed",
            {
                "user_id": user_id,
                "permission": name,
                "subject": format_subject(subject),
                "decision": final.decision,
                "allowed": allowed,
                "duration_ms": duration_ms,
                "voter_count": len(self._voters),
                "voters_consulted": len(votes),
                "voter_decisions": voter_decisions,
                "strategy": self._strategy.name,
                "reason": final.message,
            },
        )

        return AccessResult(allowed, reason)

    def _emit(self, level: int, message: str, context: Dict[str, Any]) -> None:
        """
        Log a permission check record.

        Errors raised by filters or custom loggers are reported the way
        logging.Handler.handleError reports handler errors, and never
        change the verdict.
        """
        try:
            self._logger.log(level, message, extra={LOG_CONTEXT_KEY: context})
        except Exception:
            if logging.raiseExceptions:
                traceback.print_exc(file=sys.stderr)

    def disallows(self, user_id: UserId, permission: Any, subject: Any = None) -> AccessResult:
        """Inverse of allows(); same reason chain."""
        result = self.allows(user_id, permission, subject)
        return AccessResult(not result.allowed, result.reason)

    def does_not_allow(self, user_id: UserId, permission: Any, subject: Any = None) -> AccessResult:
        """Alias for disallows()."""
        return self.disallows(user_id, permission, subject)


__all__ = [
    "AccessResult",
    "Gatekeeper",
    "LOG_CONTEXT_KEY",
    "format_subject",
]
