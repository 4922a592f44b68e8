"""Unit tests for the Subject, RoleRef, RoleBinding and RemovalRequest models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError


class TestSubject:
    """Tests for Subject identity, classification and display."""

    def test_equality_ignores_api_group(self) -> None:
        """Test that subjects differing only in api_group are equal."""
        from rbac_revoke.schemas import Subject

        a = Subject(kind="User", name="alice")
        b = Subject(kind="User", name="alice", api_group="rbac.authorization.k8s.io")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_equality_respects_kind_and_namespace(self) -> None:
        """Test that kind and namespace take part in equality."""
        from rbac_revoke.schemas import Subject

        assert Subject(kind="User", name="x") != Subject(kind="Group", name="x")
        assert Subject(kind="ServiceAccount", namespace="a", name="x") != Subject(
            kind="ServiceAccount", namespace="b", name="x"
        )

    def test_service_account_requires_namespace(self) -> None:
        """Test that a ServiceAccount without namespace is rejected."""
        from rbac_revoke.schemas import Subject

        with pytest.raises(ValidationError, match="requires a namespace"):
            Subject(kind="ServiceAccount", name="deployer")

    def test_empty_name_rejected(self) -> None:
        """Test that subjects need a non-empty name."""
        from rbac_revoke.schemas import Subject

        with pytest.raises(ValidationError):
            Subject(kind="User", name="")

    @pytest.mark.parametrize(
        ("kind", "namespace", "expected_category", "expected_display"),
        [
            ("User", None, "user", "alice"),
            ("Group", None, "group", "alice"),
            ("ServiceAccount", "ci", "serviceaccount", "ci/alice"),
            ("Robot", "ci", "other", "Robot/ci/alice"),
            ("Robot", None, "other", "Robot//alice"),
        ],
    )
    def test_category_and_display_name(
        self,
        kind: str,
        namespace: str | None,
        expected_category: str,
        expected_display: str,
    ) -> None:
        """Test classification and report rendering for each kind."""
        from rbac_revoke.schemas import Subject

        subject = Subject(kind=kind, name="alice", namespace=namespace)

        assert subject.category.value == expected_category
        assert subject.display_name == expected_display

    def test_is_frozen(self) -> None:
        """Test that subjects are immutable."""
        from rbac_revoke.schemas import Subject

        subject = Subject(kind="User", name="alice")
        with pytest.raises(ValidationError):
            subject.name = "bob"  # type: ignore[misc]

    def test_k8s_dict_keeps_api_group(self) -> None:
        """Test conversion to and from the K8s subject format."""
        from rbac_revoke.schemas import Subject

        data = {"kind": "Group", "name": "devs", "apiGroup": "rbac.authorization.k8s.io"}
        subject = Subject.from_k8s_dict(data)

        assert subject.api_group == "rbac.authorization.k8s.io"
        assert subject.to_k8s_dict() == data

    def test_k8s_dict_service_account_namespace(self) -> None:
        """Test that ServiceAccount subjects carry their namespace."""
        from rbac_revoke.schemas import Subject

        subject = Subject.from_k8s_dict(
            {"kind": "ServiceAccount", "name": "deployer", "namespace": "ci"}
        )

        assert subject.to_k8s_dict() == {
            "kind": "ServiceAccount",
            "name": "deployer",
            "namespace": "ci",
        }

    def test_service_account_namespace_defaults(self) -> None:
        """Test that a ServiceAccount without namespace takes the default."""
        from rbac_revoke.schemas import Subject

        subject = Subject.from_k8s_dict(
            {"kind": "ServiceAccount", "name": "builder"}, default_namespace="team-a"
        )

        assert subject.namespace == "team-a"
        assert subject.display_name == "team-a/builder"

    def test_default_namespace_ignored_for_users(self) -> None:
        """Test that only ServiceAccount subjects take the default namespace."""
        from rbac_revoke.schemas import Subject

        subject = Subject.from_k8s_dict({"kind": "User", "name": "alice"}, default_namespace="ns")

        assert subject.namespace is None


class TestRoleBinding:
    """Tests for RoleBinding display and manifest conversion."""

    def test_cluster_role_display_name(self) -> None:
        """Test that ClusterRole references render as the bare name."""
        from testing.fixtures.rbac import make_binding

        binding = make_binding("admin", role="admin", role_kind="ClusterRole")

        assert binding.role_display_name == "admin"

    def test_role_display_name_is_namespaced(self) -> None:
        """Test that Role references render as namespace/name."""
        from testing.fixtures.rbac import make_binding

        binding = make_binding("edit", role="editor", role_kind="Role", namespace="team-a")

        assert binding.role_display_name == "team-a/editor"

    def test_with_subjects_leaves_original_unchanged(self) -> None:
        """Test that with_subjects returns a copy."""
        from testing.fixtures.rbac import make_binding, user

        binding = make_binding("edit", user("alice"), user("bob"))
        updated = binding.with_subjects([user("bob")])

        assert [s.name for s in binding.subjects] == ["alice", "bob"]
        assert [s.name for s in updated.subjects] == ["bob"]
        assert updated.name == binding.name
        assert updated.resource_version == binding.resource_version

    def test_manifest_contains_resource_version_and_subjects(self) -> None:
        """Test the K8s manifest rendering."""
        from testing.fixtures.rbac import make_binding, user

        binding = make_binding("edit", user("alice"), role="edit")
        manifest = binding.to_k8s_manifest()

        assert manifest["apiVersion"] == "rbac.authorization.k8s.io/v1"
        assert manifest["kind"] == "RoleBinding"
        assert manifest["metadata"] == {
            "name": "edit",
            "namespace": "team-a",
            "resourceVersion": "1",
        }
        assert manifest["roleRef"] == {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "ClusterRole",
            "name": "edit",
        }
        assert manifest["subjects"] == [
            {"kind": "User", "name": "alice", "apiGroup": "rbac.authorization.k8s.io"}
        ]

    def test_from_manifest_tolerates_missing_subjects(self) -> None:
        """Test parsing a manifest whose subjects field is null."""
        from rbac_revoke.schemas import RoleBinding

        binding = RoleBinding.from_k8s_manifest(
            {
                "metadata": {"name": "empty", "namespace": "team-a", "labels": {"a": "b"}},
                "roleRef": {"kind": "Role", "name": "viewer"},
                "subjects": None,
            }
        )

        assert binding.subjects == []
        assert binding.labels == {"a": "b"}
        assert binding.role_ref.api_group == "rbac.authorization.k8s.io"


class TestRemovalRequest:
    """Tests for RemovalRequest."""

    def test_empty_request(self) -> None:
        """Test that a request with no names is valid and empty."""
        from rbac_revoke.schemas import RemovalRequest

        assert RemovalRequest().is_empty

    def test_lists_are_coerced_to_sets(self) -> None:
        """Test that duplicate names collapse."""
        from rbac_revoke.schemas import RemovalRequest

        request = RemovalRequest(users=["alice", "alice"], groups=["devs"])

        assert request.users == frozenset({"alice"})
        assert request.groups == frozenset({"devs"})
        assert not request.is_empty


class TestListedManifest:
    """Tests for bindings parsed from a cluster manifest."""

    def test_replace_body_keeps_listed_fields(self) -> None:
        """Test that only subjects change when a listed binding is rendered."""
        from rbac_revoke.schemas import RoleBinding

        listed = {
            "metadata": {
                "name": "edit",
                "namespace": "team-a",
                "resourceVersion": "7",
                "uid": "abc",
                "finalizers": ["example.com/keep"],
                "ownerReferences": [{"apiVersion": "v1", "kind": "ConfigMap", "name": "owner"}],
            },
            "roleRef": {"apiGroup": "rbac.authorization.k8s.io", "kind": "Role", "name": "editor"},
            "subjects": [
                {"kind": "User", "name": "alice", "apiGroup": "rbac.authorization.k8s.io"},
                {"kind": "ServiceAccount", "name": "builder"},
            ],
        }
        binding = RoleBinding.from_k8s_manifest(listed)

        manifest = binding.with_subjects(binding.subjects[1:]).to_k8s_manifest()

        assert manifest["apiVersion"] == "rbac.authorization.k8s.io/v1"
        assert manifest["kind"] == "RoleBinding"
        assert manifest["metadata"] == listed["metadata"]
        assert manifest["roleRef"] == listed["roleRef"]
        assert manifest["subjects"] == [
            {"kind": "ServiceAccount", "name": "builder", "namespace": "team-a"}
        ]
        assert len(listed["subjects"]) == 2
