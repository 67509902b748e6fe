"""
ROLEGATE CLI Commands

Handlers for the `rolegate` subcommands. Each handler receives the parsed
arguments and returns the process exit code:

    0  success
    1  failure (missing role, duplicate, denied check, ...)
    2  invalid usage (missing or malformed options)
"""

import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy import Engine

from rolegate.config import Settings
from rolegate.core.config_manager import ConfigManager
from rolegate.core.configuration import Configuration
from rolegate.core.exceptions import (
    AssignmentExistsError,
    AssignmentNotFoundError,
    CircularExtensionError,
    DuplicateRoleError,
    RolegateError,
)
from rolegate.core.gatekeeper import Gatekeeper
from rolegate.core.strategy import get_strategy
from rolegate.db.models import PermissionEffect, Role, UserRole, as_utc
from rolegate.db.repository import RoleRepository
from rolegate.db.session import init_db, reset_db
from rolegate.voters.default_voter import DefaultVoter

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# OUTPUT HELPERS
# =============================================================================


def success(message: str) -> None:
    print(f"[OK] {message}")


def info(message: str) -> None:
    print(message)


def error(message: str) -> None:
    print(f"[ERROR] {message}", file=sys.stderr)


def print_table(headers: Sequence[str], rows: List[Sequence[Any]]) -> None:
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    for header in headers:
        table.add_column(header, overflow="fold")
    for row in rows:
        table.add_row(*(escape(str(value)) for value in row))
    Console().print(table)


def format_datetime(value: Optional[datetime], default: str = "Never") -> str:
    if value is None:
        return default
    return as_utc(value).strftime(DATE_FORMAT)


def assignment_status(assignment: UserRole) -> str:
    return "Active" if assignment.is_valid() else "Expired"


def parse_expires_at(value: str) -> datetime:
    """
    Parse an expiry timestamp ("YYYY-MM-DD HH:MM:SS" or ISO 8601).

    Naive values are taken as UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    return as_utc(datetime.fromisoformat(value.strip()))


def confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


# =============================================================================
# DB
# =============================================================================


def db_command(args, engine: Engine) -> int:
    if args.action == "init":
        init_db(engine)
        success("Database schema created.")
        return EXIT_SUCCESS

    if not args.yes and not confirm("This drops every role and assignment. Continue?"):
        info("Database reset cancelled.")
        return EXIT_SUCCESS

    reset_db(engine)
    success("Database reset complete.")
    return EXIT_SUCCESS


# =============================================================================
# ROLE
# =============================================================================


def role_command(args, repository: RoleRepository) -> int:
    handlers: Dict[str, Callable[[Any, RoleRepository], int]] = {
        "list": _list_roles,
        "create": _create_role,
        "delete": _delete_role,
        "show": _show_role,
        "users": _role_users,
        "rename": _rename_role,
        "extend": _extend_role,
        "unextend": _unextend_role,
    }
    return handlers[args.action](args, repository)


def _require_role(repository: RoleRepository, name: str) -> Optional[Role]:
    role = repository.find_role_by_name(name)
    if role is None:
        error(f"Role '{name}' not found.")
    return role


def _list_roles(args, repository: RoleRepository) -> int:
    roles = repository.list_roles()
    if not roles:
        info("No roles found.")
        return EXIT_SUCCESS

    rows = []
    for role in roles:
        extends = ", ".join(r.name for r in role.extends) or "None"
        rows.append([
            role.name,
            role.description or "No description",
            len(role.get_permission_names()),
            len(role.user_roles),
            extends,
        ])

    print_table(["Name", "Description", "Permissions", "Users", "Extends"], rows)
    return EXIT_SUCCESS


def _create_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for create action.")
        return EXIT_INVALID

    try:
        repository.create_role(args.name, args.description)
    except DuplicateRoleError:
        error(f"Role '{args.name}' already exists.")
        return EXIT_FAILURE

    success(f"Role '{args.name}' created successfully.")
    return EXIT_SUCCESS


def _delete_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for delete action.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE

    user_count = len(role.user_roles)
    extended_by_count = len(role.extended_by)

    if (user_count or extended_by_count) and not args.yes:
        prompt = (
            f"Role '{role.name}' has {user_count} assigned users and "
            f"{extended_by_count} roles that extend it. Are you sure you want to delete it?"
        )
        if not confirm(prompt):
            info("Role deletion cancelled.")
            return EXIT_SUCCESS

    repository.delete_role(role)
    success(f"Role '{args.name}' deleted successfully.")
    return EXIT_SUCCESS


def _show_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for show action.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE

    info(f"Role: {role.name}")
    if role.description:
        info(f"Description: {role.description}")

    info(f"Extends roles: {', '.join(r.name for r in role.extends) or 'None'}")
    info(f"Extended by roles: {', '.join(r.name for r in role.extended_by) or 'None'}")

    all_permissions = role.get_all_permissions()
    if all_permissions:
        info("All permissions (including inherited):")
        print_table(["Permission", "Decision"], sorted(all_permissions.items()))
    else:
        info("No permissions assigned to this role.")

    direct = role.get_permissions()
    if direct:
        info("Direct permissions:")
        print_table(["Permission", "Decision"], sorted(direct.items()))

    info(f"Assigned users: {len(role.user_roles)}")
    return EXIT_SUCCESS


def _role_users(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for users action.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE

    return _print_role_users(role)


def _print_role_users(role: Role) -> int:
    if not role.user_roles:
        info(f"No users assigned to role '{role.name}'.")
        return EXIT_SUCCESS

    info(f"Users assigned to role: {role.name}")
    rows = [
        [
            assignment.user_id,
            format_datetime(assignment.assigned_at, default="-"),
            format_datetime(assignment.expires_at),
            assignment_status(assignment),
        ]
        for assignment in role.user_roles
    ]
    print_table(["User ID", "Assigned At", "Expires At", "Status"], rows)
    return EXIT_SUCCESS


def _rename_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for rename action.")
        return EXIT_INVALID
    if not args.new_name:
        error("New role name is required for rename action.")
        return EXIT_INVALID
    if args.new_name == args.name:
        error("New name must be different from current name.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE

    if repository.find_role_by_name(args.new_name) is not None:
        error(f"Role '{args.new_name}' already exists.")
        return EXIT_FAILURE

    role.name = args.new_name
    success(f"Role '{args.name}' renamed to '{args.new_name}' successfully.")
    return EXIT_SUCCESS


def _extend_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for extend action.")
        return EXIT_INVALID
    if not args.extends:
        error("Role to extend is required for extend action.")
        return EXIT_INVALID
    if args.extends == args.name:
        error("A role cannot extend itself.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE
    parent = _require_role(repository, args.extends)
    if parent is None:
        return EXIT_FAILURE

    if parent in role.extends:
        error(f"Role '{role.name}' already extends '{parent.name}'.")
        return EXIT_FAILURE

    try:
        role.extend_role(parent)
    except CircularExtensionError:
        error(f"Cannot extend '{parent.name}': would create circular dependency.")
        return EXIT_FAILURE

    success(f"Role '{role.name}' now extends '{parent.name}' successfully.")
    return EXIT_SUCCESS


def _unextend_role(args, repository: RoleRepository) -> int:
    if not args.name:
        error("Role name is required for unextend action.")
        return EXIT_INVALID
    if not args.extends:
        error("Role to unextend is required for unextend action.")
        return EXIT_INVALID

    role = _require_role(repository, args.name)
    if role is None:
        return EXIT_FAILURE
    parent = _require_role(repository, args.extends)
    if parent is None:
        return EXIT_FAILURE

    if parent not in role.extends:
        error(f"Role '{role.name}' does not extend '{parent.name}'.")
        return EXIT_FAILURE

    role.remove_extended_role(parent)
    success(f"Role '{role.name}' no longer extends '{parent.name}'.")
    return EXIT_SUCCESS


# =============================================================================
# PERMISSION
# =============================================================================


def permission_command(args, repository: RoleRepository) -> int:
    if not args.role:
        error("Role name is required.")
        return EXIT_INVALID

    role = _require_role(repository, args.role)
    if role is None:
        return EXIT_FAILURE

    if args.action == "list":
        return _list_permissions(role)

    if not args.permission:
        error(f"Permission name is required for {args.action} action.")
        return EXIT_INVALID

    if args.action == "add":
        return _add_permission(role, args.permission, args.decision)
    if args.action == "remove":
        return _remove_permission(role, args.permission)
    if args.action == "toggle":
        return _toggle_permission(role, args.permission)

    if args.action == "allow":
        role.allow_permission(args.permission)
    else:
        role.deny_permission(args.permission)
    success(f"Permission '{args.permission}' set to {args.action.upper()} in role '{role.name}'.")
    return EXIT_SUCCESS


def _list_permissions(role: Role) -> int:
    permissions = role.get_permissions()
    if not permissions:
        info(f"No permissions assigned to role '{role.name}'.")
        return EXIT_SUCCESS

    info(f"Permissions for role: {role.name}")
    print_table(["Permission", "Decision"], sorted(permissions.items()))
    return EXIT_SUCCESS


def _add_permission(role: Role, permission: str, decision: str) -> int:
    if permission in role.get_permissions():
        error(f"Permission '{permission}' already exists in role '{role.name}'.")
        return EXIT_FAILURE

    decision = (decision or PermissionEffect.ALLOW.value).upper()
    if decision not in (PermissionEffect.ALLOW.value, PermissionEffect.DENY.value):
        error("Decision must be either ALLOW or DENY.")
        return EXIT_INVALID

    if decision == PermissionEffect.ALLOW.value:
        role.allow_permission(permission)
    else:
        role.deny_permission(permission)

    success(f"Permission '{permission}' added to role '{role.name}' with decision '{decision}'.")
    return EXIT_SUCCESS


def _remove_permission(role: Role, permission: str) -> int:
    if permission not in role.get_permissions():
        error(f"Permission '{permission}' not found in role '{role.name}'.")
        return EXIT_FAILURE

    role.remove_permission(permission)
    success(f"Permission '{permission}' removed from role '{role.name}'.")
    return EXIT_SUCCESS


def _toggle_permission(role: Role, permission: str) -> int:
    current = role.get_permission_decision(permission)
    if current is None:
        error(f"Permission '{permission}' not found in role '{role.name}'.")
        return EXIT_FAILURE

    new = role.toggle_permission(permission)
    success(f"Permission '{permission}' toggled from '{current}' to '{new}' in role '{role.name}'.")
    return EXIT_SUCCESS


# =============================================================================
# USER
# =============================================================================


def user_command(args, repository: RoleRepository) -> int:
    if args.action == "assign":
        return _assign_role(args, repository)
    if args.action == "remove":
        return _remove_role(args, repository)
    if args.action == "roles":
        return _user_roles(args, repository)
    return _users_of_role(args, repository)


def _assign_role(args, repository: RoleRepository) -> int:
    if not args.user_id or not args.role:
        error("User ID and role name are required for assign action.")
        return EXIT_INVALID

    expires_at = None
    if args.expires_at:
        try:
            expires_at = parse_expires_at(args.expires_at)
        except ValueError:
            error("Invalid expiration date format. Use YYYY-MM-DD HH:MM:SS")
            return EXIT_INVALID

    role = _require_role(repository, args.role)
    if role is None:
        return EXIT_FAILURE

    try:
        repository.assign_role(args.user_id, role, expires_at)
    except AssignmentExistsError:
        error(f"User '{args.user_id}' already has role '{role.name}' assigned.")
        return EXIT_FAILURE

    success(
        f"Role '{role.name}' assigned to user '{args.user_id}' "
        f"(expires: {format_datetime(expires_at)})."
    )
    return EXIT_SUCCESS


def _remove_role(args, repository: RoleRepository) -> int:
    if not args.user_id or not args.role:
        error("User ID and role name are required for remove action.")
        return EXIT_INVALID

    role = _require_role(repository, args.role)
    if role is None:
        return EXIT_FAILURE

    try:
        repository.remove_assignment(args.user_id, role)
    except AssignmentNotFoundError:
        error(f"User '{args.user_id}' does not have role '{role.name}' assigned.")
        return EXIT_FAILURE

    success(f"Role '{role.name}' removed from user '{args.user_id}'.")
    return EXIT_SUCCESS


def _user_roles(args, repository: RoleRepository) -> int:
    if not args.user_id:
        error("User ID is required for roles action.")
        return EXIT_INVALID

    assignments = repository.find_assignments(args.user_id)
    if not assignments:
        info(f"User '{args.user_id}' has no roles assigned.")
        return EXIT_SUCCESS

    info(f"Roles assigned to user: {args.user_id}")
    rows = [
        [
            assignment.role.name,
            assignment.role.description or "No description",
            format_datetime(assignment.assigned_at, default="-"),
            format_datetime(assignment.expires_at),
            assignment_status(assignment),
        ]
        for assignment in assignments
    ]
    print_table(["Role", "Description", "Assigned At", "Expires At", "Status"], rows)
    return EXIT_SUCCESS


def _users_of_role(args, repository: RoleRepository) -> int:
    if not args.role:
        error("Role name is required for users action.")
        return EXIT_INVALID

    role = _require_role(repository, args.role)
    if role is None:
        return EXIT_FAILURE

    return _print_role_users(role)


# =============================================================================
# CHECK
# =============================================================================


def build_cli_configuration(
    settings: Settings, repository: RoleRepository, config_path: Optional[str] = None
) -> Configuration:
    """
    Configuration used by `rolegate check`.

    A configuration file wins; otherwise a single default voter with the
    strategy from settings.

    Raises:
        ConfigurationError: If the configuration file or strategy is invalid
    """
    path = config_path or settings.CONFIG_FILE
    if path:
        return ConfigManager(path).build_configuration(repository)

    strategy = get_strategy(settings.STRATEGY)
    return Configuration(voters=[DefaultVoter(repository, strategy)], strategy=strategy)


def check_command(args, repository: RoleRepository, settings: Settings) -> int:
    try:
        configuration = build_cli_configuration(settings, repository, args.config)
        gatekeeper = Gatekeeper(configuration)
    except RolegateError as e:
        error(str(e))
        return EXIT_INVALID

    allowed, reason = gatekeeper.allows(args.user_id, args.permission, args.subject)

    verdict = "ALLOWED" if allowed else "DENIED"
    info(f"{verdict}: {reason.message}")

    if args.trace:
        for entry in reason.history():
            for line in entry["chain"]:
                info(f"  {entry['voter']}: {line}")

    return EXIT_SUCCESS if allowed else EXIT_FAILURE


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "EXIT_INVALID",
    "build_cli_configuration",
    "check_command",
    "db_command",
    "parse_expires_at",
    "permission_command",
    "print_table",
    "role_command",
    "user_command",
]
