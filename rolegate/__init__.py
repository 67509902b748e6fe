# ROLEGATE - Role-Based Access Control
"""
ROLEGATE - pluggable role-based access control.

A gatekeeper consults an ordered stack of voters, combines their
ALLOW / DENY / ABSTAIN votes with a strategy and explains every
verdict with a reason chain.

    from rolegate import Configuration, DefaultVoter, Gatekeeper

    config = Configuration().add_voter(DefaultVoter(repository))
    gatekeeper = Gatekeeper(config)

    allowed, reason = gatekeeper.allows("user123", "post:edit")
"""

from rolegate.core import (
    AccessResult,
    AllowWinsStrategy,
    ConfigManager,
    Configuration,
    DenyWinsStrategy,
    Gatekeeper,
    Reason,
    RolegateError,
    Strategy,
    VoteOutcome,
    VoteResult,
    format_subject,
    get_strategy,
)
from rolegate.db import Role, RoleRepository, SqlAlchemyRoleRepository, UserRole
from rolegate.voters import DefaultVoter, IpAddressVoter, TimeBasedVoter, Voter

__version__ = "1.0.0"

__all__ = [
    "AccessResult",
    "AllowWinsStrategy",
    "ConfigManager",
    "Configuration",
    "DefaultVoter",
    "DenyWinsStrategy",
    "Gatekeeper",
    "IpAddressVoter",
    "Reason",
    "Role",
    "RoleRepository",
    "RolegateError",
    "SqlAlchemyRoleRepository",
    "Strategy",
    "TimeBasedVoter",
    "UserRole",
    "VoteOutcome",
    "VoteResult",
    "Voter",
    "format_subject",
    "get_strategy",
    "__version__",
]
