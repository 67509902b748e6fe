# ROLEGATE Core - Decision Engine
"""
Core decision engine for ROLEGATE.

Modules:
    exceptions: Centralized exception hierarchy
    vote: Ternary vote outcome and vote result
    strategy: Vote combining strategies (deny wins, allow wins)
    reason: Linked explanation chain of a permission check
    configuration: Voter stack, strategy and logger
    gatekeeper: Permission check facade
    config_manager: YAML/JSON configuration loading
"""

from .exceptions import (
    RolegateError,
    ConfigurationError,
    InvalidConfigError,
    MissingConfigError,
    RoleGraphError,
    SelfExtensionError,
    CircularExtensionError,
    PermissionNotFoundError,
    RepositoryError,
    RoleNotFoundError,
    DuplicateRoleError,
    AssignmentExistsError,
    AssignmentNotFoundError,
)

from .vote import VoteOutcome, VoteResult
from .strategy import (
    Strategy,
    DenyWinsStrategy,
    AllowWinsStrategy,
    STRATEGIES,
    get_strategy,
)
from .reason import Reason
from .subject import format_subject
from .configuration import Configuration
from .gatekeeper import AccessResult, Gatekeeper
from .config_manager import ConfigManager

__all__ = [
    # Exceptions
    "RolegateError",
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    "RoleGraphError",
    "SelfExtensionError",
    "CircularExtensionError",
    "PermissionNotFoundError",
    "RepositoryError",
    "RoleNotFoundError",
    "DuplicateRoleError",
    "AssignmentExistsError",
    "AssignmentNotFoundError",
    # Votes
    "VoteOutcome",
    "VoteResult",
    # Strategies
    "Strategy",
    "DenyWinsStrategy",
    "AllowWinsStrategy",
    "STRATEGIES",
    "get_strategy",
    # Engine
    "Reason",
    "format_subject",
    "Configuration",
    "AccessResult",
    "Gatekeeper",
    "ConfigManager",
]
