"""
ROLEGATE - Engine Configuration

Voter stack, strategy and logger used by the gatekeeper.
"""

import logging
from typing import Iterable, Optional, Tuple

from rolegate.core.strategy import DenyWinsStrategy, Strategy
from rolegate.voters.base import Voter

DEFAULT_LOGGER_NAME = "ROLEGATE_Gatekeeper"


class Configuration:
    """
    Configuration of the gatekeeper.

    Voters are consulted in the order they are added. The strategy
    defaults to DenyWinsStrategy.

    Example:
        config = Configuration()
        config.add_voter(DefaultVoter(repository))
        config.set_strategy(AllowWinsStrategy())
        gatekeeper = Gatekeeper(config)
    """

    def __init__(
        self,
        voters: Optional[Iterable[Voter]] = None,
        strategy: Optional[Strategy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._voters = list(voters or [])
        self._strategy = strategy or DenyWinsStrategy()
        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

    def add_voter(self, voter: Voter) -> "Configuration":
        """Append a voter to the stack."""
        self._voters.append(voter)
        return self

    def set_voters(self, voters: Iterable[Voter]) -> "Configuration":
        """Replace the voter stack."""
        self._voters = list(voters)
        return self

    def clear_voters(self) -> "Configuration":
        self._voters = []
        return self

    @property
    def voters(self) -> Tuple[Voter, ...]:
        return tuple(self._voters)

    @property
    def voter_count(self) -> int:
        return len(self._voters)

    def set_strategy(self, strategy: Strategy) -> "Configuration":
        self._strategy = strategy
        return self

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    def set_logger(self, logger: logging.Logger) -> "Configuration":
        """
        Set the logger receiving permission check records.

        DEBUG: one record per voter decision
        INFO/WARNING: final decision (WARNING when denied)
        """
        self._logger = logger
        return self

    @property
    def logger(self) -> logging.Logger:
        return self._logger


__all__ = ["Configuration", "DEFAULT_LOGGER_NAME"]
