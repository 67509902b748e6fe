"""
Tests for the Role Graph
========================

Tests role extension, cycle prevention and permission resolution.
"""

from collections import Counter

import pytest

from rolegate.core.exceptions import (
    CircularExtensionError,
    PermissionNotFoundError,
    SelfExtensionError,
)
from rolegate.db.models import PermissionDecision, Role


@pytest.fixture
def viewer():
    role = Role("viewer", "Read only")
    role.allow_permission("post:read")
    return role


@pytest.fixture
def editor(viewer):
    role = Role("editor")
    role.allow_permission("post:edit")
    role.extend_role(viewer)
    return role


class TestExtension:
    """Tests for extend/unextend."""

    def test_extend_updates_both_views(self, viewer, editor):
        """extends and extended_by should mirror each other."""
        assert viewer in editor.extends
        assert editor in viewer.extended_by

    def test_extend_is_idempotent(self, viewer, editor):
        editor.extend_role(viewer)
        assert editor.extends.count(viewer) == 1
        assert viewer.extended_by.count(editor) == 1

    def test_remove_extension(self, viewer, editor):
        """Removing an extension should update both views."""
        editor.remove_extended_role(viewer)
        assert viewer not in editor.extends
        assert editor not in viewer.extended_by

    def test_remove_missing_extension_is_noop(self, viewer):
        other = Role("other")
        viewer.remove_extended_role(other)
        assert viewer.extends == []

    def test_extend_then_remove_restores_state(self, viewer):
        role = Role("temp")
        before = role.get_all_permission_decisions()
        role.extend_role(viewer)
        role.remove_extended_role(viewer)
        assert role.get_all_permission_decisions() == before
        assert role not in viewer.extended_by

    def test_self_extension_rejected(self, viewer):
        with pytest.raises(SelfExtensionError):
            viewer.extend_role(viewer)

    def test_direct_cycle_rejected(self, viewer, editor):
        """A role extended by another cannot extend it back."""
        with pytest.raises(CircularExtensionError) as exc_info:
            viewer.extend_role(editor)
        assert exc_info.value.role == "viewer"
        assert exc_info.value.extended_role == "editor"
        assert editor not in viewer.extends

    def test_transitive_cycle_rejected(self, viewer, editor):
        """Cycles through intermediate roles should be rejected too."""
        admin = Role("admin")
        admin.extend_role(editor)
        with pytest.raises(CircularExtensionError):
            viewer.extend_role(admin)

    def test_extends_role_is_transitive(self, viewer, editor):
        admin = Role("admin")
        admin.extend_role(editor)
        assert admin.extends_role(viewer)
        assert not viewer.extends_role(admin)

    def test_extends_role_by_name_is_direct(self, viewer, editor):
        admin = Role("admin")
        admin.extend_role(editor)
        assert admin.extends_role_by_name("editor")
        assert not admin.extends_role_by_name("viewer")


class TestPermissionResolution:
    """Tests for direct and inherited permissions."""

    def test_has_permission(self, editor):
        assert editor.has_permission("post:edit")
        assert editor.has_permission("post:read")
        assert not editor.has_permission("post:delete")

    def test_direct_decision_takes_precedence_for_display(self, viewer, editor):
        editor.deny_permission("post:read")
        assert editor.get_permission_decision("post:read") == "DENY"
        assert viewer.get_permission_decision("post:read") == "ALLOW"

    def test_inherited_decision(self, editor):
        assert editor.get_permission_decision("post:read") == "ALLOW"
        assert editor.get_permission_decision("missing") is None

    def test_all_decisions_inherited_first(self, viewer, editor):
        """Inherited decisions should come before direct ones."""
        decisions = editor.get_all_permission_decisions()
        assert decisions == [
            PermissionDecision("post:read", "ALLOW", "viewer"),
            PermissionDecision("post:edit", "ALLOW", "editor"),
        ]

    def test_direct_permission_does_not_dominate(self, viewer, editor):
        """A direct override should be reported next to the inherited entry."""
        editor.deny_permission("post:read")
        decisions = Counter(
            (d.decision, d.source)
            for d in editor.get_all_permission_decisions()
            if d.permission == "post:read"
        )
        assert decisions == Counter({("ALLOW", "viewer"): 1, ("DENY", "editor"): 1})

    def test_diamond_reports_duplicates(self):
        """A role reached through two paths contributes twice."""
        base = Role("base")
        base.allow_permission("doc:read")
        left = Role("left")
        right = Role("right")
        left.extend_role(base)
        right.extend_role(base)
        top = Role("top")
        top.extend_role(left)
        top.extend_role(right)

        decisions = [d for d in top.get_all_permission_decisions() if d.permission == "doc:read"]
        assert len(decisions) == 2
        assert all(d.source == "base" for d in decisions)

    def test_get_all_permissions_merges_for_display(self, editor):
        assert editor.get_all_permissions() == {"post:read": "ALLOW", "post:edit": "ALLOW"}

    def test_permission_names_are_unique(self, viewer, editor):
        editor.deny_permission("post:read")
        assert sorted(editor.get_permission_names()) == ["post:edit", "post:read"]

    def test_traversal_survives_cycle_built_around_guard(self, viewer, editor):
        """Traversals should terminate even if a cycle slipped into the graph."""
        viewer.extends.append(editor)
        assert editor.has_permission("post:edit")
        assert not editor.has_permission("missing")
        assert len(editor.get_all_permission_decisions()) >= 2


class TestDirectPermissions:
    """Tests for direct permission mutation."""

    def test_allow_and_deny_overwrite(self, viewer):
        viewer.deny_permission("post:read")
        assert viewer.get_permissions() == {"post:read": "DENY"}
        viewer.allow_permission("post:read")
        assert viewer.get_permissions() == {"post:read": "ALLOW"}

    def test_remove_permission(self, viewer):
        viewer.remove_permission("post:read")
        viewer.remove_permission("never-there")
        assert viewer.get_permissions() == {}

    def test_toggle_direct(self, viewer):
        assert viewer.toggle_permission("post:read") == "DENY"
        assert viewer.toggle_permission("post:read") == "ALLOW"

    def test_toggle_inherited_creates_override(self, viewer, editor):
        """Toggling an inherited permission writes a direct override."""
        assert editor.toggle_permission("post:read") == "DENY"
        assert editor.get_permissions()["post:read"] == "DENY"
        assert viewer.get_permissions()["post:read"] == "ALLOW"

    def test_toggle_missing_raises(self, viewer):
        with pytest.raises(PermissionNotFoundError) as exc_info:
            viewer.toggle_permission("post:delete")
        assert exc_info.value.permission == "post:delete"

    def test_set_and_clear(self, viewer):
        viewer.set_permissions({"a": "ALLOW", "b": "DENY"})
        assert viewer.get_permissions() == {"a": "ALLOW", "b": "DENY"}
        viewer.clear_permissions()
        assert viewer.get_permissions() == {}

    def test_get_permissions_returns_copy(self, viewer):
        permissions = viewer.get_permissions()
        permissions["post:delete"] = "ALLOW"
        assert "post:delete" not in viewer.get_permissions()


class TestPersistence:
    """Tests for the role graph after a database round trip."""

    def test_graph_survives_reload(self, engine, session, repository):
        viewer = repository.create_role("viewer")
        viewer.allow_permission("post:read")
        editor = repository.create_role("editor")
        editor.extend_role(viewer)
        repository.commit()
        session.expunge_all()

        reloaded = repository.get_role("editor")
        assert [r.name for r in reloaded.extends] == ["viewer"]
        assert reloaded.has_permission("post:read")
        assert [r.name for r in reloaded.extends[0].extended_by] == ["editor"]

    def test_permission_changes_are_persisted(self, session, repository):
        """In-place dict mutations should be tracked."""
        role = repository.create_role("tracked")
        repository.commit()

        role.deny_permission("x")
        repository.commit()
        session.expunge_all()

        assert repository.get_role("tracked").get_permissions() == {"x": "DENY"}
