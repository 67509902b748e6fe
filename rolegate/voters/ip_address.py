"""
ROLEGATE - IP Address Voter

Example voter: allows access only from listed IPs or CIDR ranges.

The subject of the permission check is expected to be the client IP
string. Without one the voter abstains.
"""

import ipaddress
from typing import Any, Iterable, List

from rolegate.core.vote import VoteResult
from rolegate.voters.base import UserId, Voter


class IpAddressVoter(Voter):
    """
    Allow when the subject IP matches an allowed address or range.

    Example:
        voter = IpAddressVoter(["10.0.0.0/8", "192.168.1.10"])
        voter.vote("u1", "admin:access", "10.1.2.3")   # ALLOW
    """

    def __init__(self, allowed: Iterable[str]):
        self.allowed: List[str] = list(allowed)

    def vote(self, user_id: UserId, permission: Any, subject: Any = None) -> VoteResult:
        if not isinstance(subject, str) or subject == "":
            return VoteResult.abstain("No IP provided; abstaining")

        for rule in self.allowed:
            if self._matches(subject, rule):
                return VoteResult.allow(f"IP {subject} is allowed by rule {rule}")

        return VoteResult.deny(f"IP {subject} is not in allowed list")

    @staticmethod
    def _matches(ip: str, rule: str) -> bool:
        if "/" not in rule:
            return ip == rule

        try:
            network = ipaddress.ip_network(rule, strict=False)
            return ipaddress.ip_address(ip) in network
        except ValueError:
            return False


__all__ = ["IpAddressVoter"]
