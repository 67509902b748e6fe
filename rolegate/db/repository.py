"""
Role Repository

Persistence boundary consumed by the decision engine and the CLI.

The decision path only reads (`find_role_by_name`, `find_assignments`,
`find_assignment`). Administrative writes are used by the CLI and by
host applications managing roles.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from rolegate.core.exceptions import (
    AssignmentExistsError,
    AssignmentNotFoundError,
    DuplicateRoleError,
    RoleNotFoundError,
)
from rolegate.db.models import Role, UserRole

logger = logging.getLogger("ROLEGATE_Repository")


class RoleRepository(ABC):
    """Storage of roles and user-role assignments."""

    @abstractmethod
    def find_role_by_name(self, name: str) -> Optional[Role]:
        """Find a role by its unique name."""

    @abstractmethod
    def find_assignments(self, user_id: Union[str, int]) -> List[UserRole]:
        """
        Find every assignment of a user.

        Expired rows are returned too; callers check `UserRole.is_valid()`.
        """

    @abstractmethod
    def find_assignment(self, user_id: Union[str, int], role: Role) -> Optional[UserRole]:
        """Find the assignment of one role to one user."""

    @abstractmethod
    def list_roles(self) -> List[Role]:
        """All roles ordered by name."""

    @abstractmethod
    def create_role(self, name: str, description: Optional[str] = None) -> Role:
        """Create a new role."""

    @abstractmethod
    def delete_role(self, role: Role) -> None:
        """Delete a role with its extensions and assignments."""

    @abstractmethod
    def assign_role(
        self, user_id: Union[str, int], role: Role, expires_at: Optional[datetime] = None
    ) -> UserRole:
        """Assign a role to a user."""

    @abstractmethod
    def remove_assignment(self, user_id: Union[str, int], role: Role) -> None:
        """Remove a role from a user."""

    @abstractmethod
    def commit(self) -> None:
        """Persist pending changes."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard pending changes."""

    def get_role(self, name: str) -> Role:
        """
        Get a role by name.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = self.find_role_by_name(name)
        if role is None:
            raise RoleNotFoundError(f"Role '{name}' not found.", details={"role": name})
        return role


class SqlAlchemyRoleRepository(RoleRepository):
    """
    Role repository backed by a SQLAlchemy session.

    The session is owned by the caller, which also decides when to commit.

    Example:
        with session_factory() as session:
            repository = SqlAlchemyRoleRepository(session)
            admin = repository.create_role("admin", "Administrator role")
            admin.allow_permission("user:create")
            repository.commit()
    """

    def __init__(self, session: Session):
        self.session = session

    def find_role_by_name(self, name: str) -> Optional[Role]:
        return self.session.scalars(select(Role).where(Role.name == name)).first()

    def find_assignments(self, user_id: Union[str, int]) -> List[UserRole]:
        stmt = (
            select(UserRole)
            .where(UserRole.user_id == str(user_id))
            .order_by(UserRole.assigned_at)
        )
        return list(self.session.scalars(stmt))

    def find_assignment(self, user_id: Union[str, int], role: Role) -> Optional[UserRole]:
        stmt = select(UserRole).where(
            UserRole.user_id == str(user_id),
            UserRole.role_id == role.id,
        )
        return self.session.scalars(stmt).first()

    def list_roles(self) -> List[Role]:
        return list(self.session.scalars(select(Role).order_by(Role.name)))

    def create_role(self, name: str, description: Optional[str] = None) -> Role:
        if self.find_role_by_name(name) is not None:
            raise DuplicateRoleError(f"Role '{name}' already exists.", details={"role": name})

        role = Role(name, description)
        self.session.add(role)
        self.session.flush()
        logger.info(f"Role created: {name}")
        return role

    def delete_role(self, role: Role) -> None:
        # Sever both directions explicitly so the mirrored collections of
        # roles still loaded in this session stay consistent.
        for extended in list(role.extends):
            role.remove_extended_role(extended)
        for extender in list(role.extended_by):
            extender.remove_extended_role(role)

        self.session.delete(role)
        self.session.flush()
        logger.info(f"Role deleted: {role.name}")

    def assign_role(
        self, user_id: Union[str, int], role: Role, expires_at: Optional[datetime] = None
    ) -> UserRole:
        if self.find_assignment(user_id, role) is not None:
            raise AssignmentExistsError(
                f"User '{user_id}' already has role '{role.name}' assigned.",
                details={"user_id": str(user_id), "role": role.name},
            )

        assignment = UserRole(str(user_id), role, expires_at)
        self.session.add(assignment)
        self.session.flush()
        logger.info(f"Role assigned: {role.name} -> {user_id}")
        return assignment

    def remove_assignment(self, user_id: Union[str, int], role: Role) -> None:
        assignment = self.find_assignment(user_id, role)
        if assignment is None:
            raise AssignmentNotFoundError(
                f"User '{user_id}' does not have role '{role.name}' assigned.",
                details={"user_id": str(user_id), "role": role.name},
            )

        role.user_roles.remove(assignment)
        self.session.delete(assignment)
        self.session.flush()
        logger.info(f"Role removed: {role.name} -> {user_id}")

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


__all__ = [
    "RoleRepository",
    "SqlAlchemyRoleRepository",
]
