# ROLEGATE Database Layer
"""
Role graph persistence.

Modules:
    models: Role and UserRole ORM models
    repository: Role repository contract and SQLAlchemy implementation
    session: Engine and session factory helpers
"""

from .models import Base, PermissionDecision, PermissionEffect, Role, UserRole
from .repository import RoleRepository, SqlAlchemyRoleRepository
from .session import create_db_engine, create_session_factory, init_db, reset_db

__all__ = [
    "Base",
    "PermissionDecision",
    "PermissionEffect",
    "Role",
    "UserRole",
    "RoleRepository",
    "SqlAlchemyRoleRepository",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "reset_db",
]
