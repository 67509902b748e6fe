# ROLEGATE Voters
"""
Voters consulted by the gatekeeper.

Modules:
    base: Voter contract
    default_voter: Role-based voter backed by a role repository
    ip_address: Example voter allowing listed addresses and networks
    time_based: Example voter allowing a daily time window
"""

from .base import UserId, Voter, permission_name
from .default_voter import DefaultVoter
from .ip_address import IpAddressVoter
from .time_based import TimeBasedVoter

__all__ = [
    "UserId",
    "Voter",
    "permission_name",
    "DefaultVoter",
    "IpAddressVoter",
    "TimeBasedVoter",
]
