"""
ROLEGATE - Centralized Exception Hierarchy
==========================================

Structured exception types for configuration, role graph and
repository failures.

Exception Categories:
    - ConfigurationError: Engine setup problems (e.g. no voters)
    - RoleGraphError: Invalid mutations of the role extension graph
    - RepositoryError: Persistence lookups and administrative writes

Authorization outcomes are never reported through exceptions: a denied
or abstained check is a normal return value.

Author: ROLEGATE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class RolegateError(Exception):
    """
    Base exception for all ROLEGATE errors.

    Attributes:
        message: Human-readable error description
        code: Optional error code for programmatic handling
        details: Optional dict with additional context
        recoverable: Whether the caller can fix the input and retry
    """

    recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(RolegateError):
    """Base exception for configuration errors."""

    recoverable: bool = False


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    pass


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    pass


# =============================================================================
# ROLE GRAPH ERRORS
# =============================================================================


class RoleGraphError(RolegateError):
    """Base exception for role graph mutations."""

    def __init__(self, message: str, role: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.role = role


class SelfExtensionError(RoleGraphError):
    """A role was asked to extend itself."""

    pass


class CircularExtensionError(RoleGraphError):
    """Adding the extension would close a cycle in the role graph."""

    def __init__(
        self,
        message: str,
        role: Optional[str] = None,
        extended_role: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, role=role, **kwargs)
        self.extended_role = extended_role


class PermissionNotFoundError(RoleGraphError):
    """Permission is not defined on the role or any role it extends."""

    def __init__(self, message: str, permission: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.permission = permission


# =============================================================================
# REPOSITORY ERRORS
# =============================================================================


class RepositoryError(RolegateError):
    """Base exception for repository errors."""

    pass


class RoleNotFoundError(RepositoryError):
    """Role does not exist."""

    pass


class DuplicateRoleError(RepositoryError):
    """Role name is already taken."""

    pass


class AssignmentExistsError(RepositoryError):
    """User already holds the role."""

    pass


class AssignmentNotFoundError(RepositoryError):
    """User does not hold the role."""

    pass


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    "RolegateError",
    # Config
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    # Role graph
    "RoleGraphError",
    "SelfExtensionError",
    "CircularExtensionError",
    "PermissionNotFoundError",
    # Repository
    "RepositoryError",
    "RoleNotFoundError",
    "DuplicateRoleError",
    "AssignmentExistsError",
    "AssignmentNotFoundError",
]
