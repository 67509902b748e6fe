"""
SQLAlchemy ORM Models

Roles, role extensions and user-role assignments.

A Role stores its direct permissions as a JSON mapping of permission
name to "ALLOW"/"DENY" and may extend any number of other roles.
Extensions form a directed graph; `extends` and `extended_by` are the
two mirrored views of the same association table and are kept in sync by
SQLAlchemy's back_populates events.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, NamedTuple, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from rolegate.core.exceptions import (
    CircularExtensionError,
    PermissionNotFoundError,
    SelfExtensionError,
)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PermissionEffect(str, Enum):
    """Decision stored for a permission on a role."""

    ALLOW = "ALLOW"
    DENY = "DENY"


class PermissionDecision(NamedTuple):
    """One permission decision contributed by a role in the graph."""

    permission: str
    decision: str
    source: str


role_extensions = Table(
    "rolegate_role_extensions",
    Base.metadata,
    Column(
        "role_id",
        String(36),
        ForeignKey("rolegate_roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column(
        "extended_role_id",
        String(36),
        ForeignKey("rolegate_roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Role(Base):
    """Named, extensible container of permission decisions."""

    __tablename__ = "rolegate_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    permissions: Mapped[Dict[str, str]] = mapped_column(
        MutableDict.as_mutable(JSON), default=dict, nullable=False
    )

    # Relationships
    extends: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=role_extensions,
        primaryjoin=lambda: Role.id == role_extensions.c.role_id,
        secondaryjoin=lambda: Role.id == role_extensions.c.extended_role_id,
        back_populates="extended_by",
    )
    extended_by: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=role_extensions,
        primaryjoin=lambda: Role.id == role_extensions.c.extended_role_id,
        secondaryjoin=lambda: Role.id == role_extensions.c.role_id,
        back_populates="extends",
    )
    user_roles: Mapped[List["UserRole"]] = relationship(
        "UserRole", back_populates="role", cascade="all, delete-orphan"
    )

    def __init__(self, name: str, description: Optional[str] = None, id: Optional[str] = None):
        super().__init__(
            id=id or str(uuid.uuid4()),
            name=name,
            description=description,
            permissions={},
        )

    # ==================== Extension graph ====================

    def extend_role(self, role: "Role") -> None:
        """
        Inherit permissions from `role`.

        Adding an existing extension is a no-op.

        Raises:
            SelfExtensionError: If `role` is this role
            CircularExtensionError: If `role` already extends this role
        """
        if role is self:
            raise SelfExtensionError(
                f"Role '{self.name}' cannot extend itself", role=self.name
            )
        if role in self.extends:
            return
        if role.extends_role(self):
            raise CircularExtensionError(
                f"Role '{self.name}' cannot extend '{role.name}': would create circular dependency",
                role=self.name,
                extended_role=role.name,
            )
        self.extends.append(role)

    def remove_extended_role(self, role: "Role") -> None:
        """Stop inheriting from `role`."""
        if role in self.extends:
            self.extends.remove(role)

    def extends_role(self, role: "Role") -> bool:
        """Check if this role extends `role`, directly or transitively."""
        visited = set()
        stack = list(self.extends)
        while stack:
            current = stack.pop()
            if current is role:
                return True
            if id(current) in visited:
                continue
            visited.add(id(current))
            stack.extend(current.extends)
        return False

    def extends_role_by_name(self, role_name: str) -> bool:
        """Check if this role directly extends a role by name."""
        return any(role.name == role_name for role in self.extends)

    def _walk_extends(self, path: FrozenSet[int]) -> Iterator["Role"]:
        # Skip roles already on the current path so a cycle written around
        # extend_role() cannot recurse forever. Diamonds are still visited twice.
        for role in self.extends:
            if id(role) not in path:
                yield role

    # ==================== Permission resolution ====================

    def has_permission(self, permission_name: str, _path: FrozenSet[int] = frozenset()) -> bool:
        """Check direct and inherited permissions."""
        if permission_name in self.permissions:
            return True

        path = _path | {id(self)}
        return any(
            role.has_permission(permission_name, path) for role in self._walk_extends(path)
        )

    def get_permission_decision(
        self, permission_name: str, _path: FrozenSet[int] = frozenset()
    ) -> Optional[str]:
        """
        Get the decision for a permission, for display purposes.

        Direct permissions take precedence, then the first decision found
        depth-first through extended roles. Authorization does not use
        this: the default voter pools every decision and lets the
        strategy resolve conflicts.
        """
        if permission_name in self.permissions:
            return self.permissions[permission_name]

        path = _path | {id(self)}
        for role in self._walk_extends(path):
            decision = role.get_permission_decision(permission_name, path)
            if decision is not None:
                return decision
        return None

    def get_all_permission_decisions(
        self, _path: FrozenSet[int] = frozenset()
    ) -> List[PermissionDecision]:
        """
        Get every permission decision from this role and all roles it extends.

        Inherited decisions come first, in extension order, followed by
        this role's direct permissions. Nothing is merged: conflicting
        decisions for the same permission are all returned.
        """
        decisions: List[PermissionDecision] = []

        path = _path | {id(self)}
        for role in self._walk_extends(path):
            decisions.extend(role.get_all_permission_decisions(path))

        for permission, decision in self.permissions.items():
            decisions.append(PermissionDecision(permission, decision, self.name))

        return decisions

    def get_all_permissions(self) -> Dict[str, str]:
        """All permissions merged by name (display only; later entries win)."""
        return {d.permission: d.decision for d in self.get_all_permission_decisions()}

    def get_permission_names(self) -> List[str]:
        """Unique permission names, including inherited ones."""
        names: List[str] = []
        for decision in self.get_all_permission_decisions():
            if decision.permission not in names:
                names.append(decision.permission)
        return names

    # ==================== Direct permissions ====================

    def allow_permission(self, permission_name: str) -> None:
        self.permissions[permission_name] = PermissionEffect.ALLOW.value

    def deny_permission(self, permission_name: str) -> None:
        self.permissions[permission_name] = PermissionEffect.DENY.value

    def remove_permission(self, permission_name: str) -> None:
        self.permissions.pop(permission_name, None)

    def toggle_permission(self, permission_name: str) -> str:
        """
        Flip a permission between ALLOW and DENY on this role.

        Returns:
            The new decision

        Raises:
            PermissionNotFoundError: If the permission is not defined
        """
        current = self.get_permission_decision(permission_name)
        if current is None:
            raise PermissionNotFoundError(
                f"Permission '{permission_name}' not found in role '{self.name}'",
                role=self.name,
                permission=permission_name,
            )
        if current == PermissionEffect.ALLOW.value:
            self.deny_permission(permission_name)
            return PermissionEffect.DENY.value
        self.allow_permission(permission_name)
        return PermissionEffect.ALLOW.value

    def get_permissions(self) -> Dict[str, str]:
        """Direct permissions only."""
        return dict(self.permissions)

    def set_permissions(self, permissions: Dict[str, str]) -> None:
        self.permissions = dict(permissions)

    def clear_permissions(self) -> None:
        self.permissions.clear()

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class UserRole(Base):
    """Assignment of a role to an external user identifier."""

    __tablename__ = "rolegate_user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="user_role_unique"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rolegate_roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)

    role: Mapped["Role"] = relationship("Role", back_populates="user_roles")

    def __init__(
        self,
        user_id: str,
        role: Role,
        expires_at: Optional[datetime] = None,
        id: Optional[str] = None,
    ):
        super().__init__(
            id=id or str(uuid.uuid4()),
            user_id=str(user_id),
            role=role,
            assigned_at=utcnow(),
            expires_at=expires_at,
        )

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Check the assignment has not expired. Expiry is exclusive."""
        if self.expires_at is None:
            return True
        now = as_utc(now) if now is not None else utcnow()
        return as_utc(self.expires_at) > now

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return not self.is_valid(now)

    def __repr__(self) -> str:
        return f"<UserRole {self.user_id} -> {self.role.name if self.role else self.role_id}>"
