"""
ROLEGATE - Default Voter
========================

Role-based voter backed by the role repository.

The voter loads the user's assignments once, pools every permission
decision reachable through the user's valid roles (inherited ones
included) and lets the configured strategy resolve conflicts between
them. Role hierarchy never picks a winner on its own.

Failure policy: any error raised while reading roles is turned into a
DENY vote. Infrastructure problems must neither grant access nor crash
the caller.

Author: ROLEGATE Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from rolegate.core.strategy import DenyWinsStrategy, Strategy
from rolegate.core.vote import VoteResult
from rolegate.db.models import PermissionDecision, PermissionEffect, utcnow
from rolegate.db.repository import RoleRepository
from rolegate.voters.base import UserId, Voter, permission_name

logger = logging.getLogger("ROLEGATE_DefaultVoter")


class DefaultVoter(Voter):
    """
    Votes on a permission using the roles assigned to the user.

    Example:
        voter = DefaultVoter(SqlAlchemyRoleRepository(session), DenyWinsStrategy())
        vote = voter.vote("user123", "post:edit")
    """

    def __init__(
        self,
        repository: RoleRepository,
        strategy: Optional[Strategy] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.strategy = strategy or DenyWinsStrategy()
        self._clock = clock or utcnow

    def vote(self, user_id: UserId, permission: Any, subject: Any = None) -> VoteResult:
        name = permission_name(permission)

        try:
            assignments = self.repository.find_assignments(user_id)

            if not assignments:
                return VoteResult.deny("User not found or has no roles")

            now = self._clock()
            decisions: List[PermissionDecision] = []
            for assignment in assignments:
                if not assignment.is_valid(now):
                    continue
                decisions.extend(
                    d for d in assignment.role.get_all_permission_decisions()
                    if d.permission == name
                )

            if not decisions:
                return VoteResult.deny(f"User does not have permission: {name}")

            votes = [self._to_vote(d) for d in decisions]
            return self.strategy.decide(votes)

        except Exception as e:
            logger.warning(f"Permission lookup failed for user {user_id} ({name}): {e}")
            return VoteResult.deny(f"Error checking user permissions: {e}")

    @staticmethod
    def _to_vote(decision: PermissionDecision) -> VoteResult:
        if decision.decision == PermissionEffect.ALLOW.value:
            return VoteResult.allow(f"User has ALLOW permission through role: {decision.source}")
        if decision.decision == PermissionEffect.DENY.value:
            return VoteResult.deny(f"User has DENY permission through role: {decision.source}")
        return VoteResult.abstain(
            f"Unknown permission decision: {decision.decision} from role: {decision.source}"
        )


__all__ = ["DefaultVoter"]
