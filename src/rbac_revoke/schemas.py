"""Role binding and subject models.

This module defines the Pydantic models the reconciliation engine operates on:
Subject, RoleRef, RoleBinding and RemovalRequest. RoleBinding can be built
from, and rendered back to, a Kubernetes manifest dictionary.

Example:
    >>> from rbac_revoke.schemas import RoleBinding, RoleRef, Subject
    >>> binding = RoleBinding(
    ...     name="admin",
    ...     namespace="team-a",
    ...     role_ref=RoleRef(kind="ClusterRole", name="admin"),
    ...     subjects=[Subject(kind="User", name="alice")],
    ... )
    >>> binding.role_display_name
    'admin'
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

RBAC_API_GROUP = "rbac.authorization.k8s.io"
RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"

USER_KIND = "User"
GROUP_KIND = "Group"
SERVICE_ACCOUNT_KIND = "ServiceAccount"
CLUSTER_ROLE_KIND = "ClusterRole"


class SubjectCategory(str, Enum):
    """Closed classification of subject kinds.

    Any kind other than User, Group or ServiceAccount falls into OTHER,
    so unrecognized kinds are still reported rather than dropped.
    """

    USER = "user"
    GROUP = "group"
    SERVICE_ACCOUNT = "serviceaccount"
    OTHER = "other"

    @classmethod
    def from_kind(cls, kind: str) -> SubjectCategory:
        """Classify a subject kind string.

        Args:
            kind: Subject kind as found on a RoleBinding (e.g. "User").

        Returns:
            The matching category, OTHER for any unrecognized kind.
        """
        if kind == USER_KIND:
            return cls.USER
        if kind == GROUP_KIND:
            return cls.GROUP
        if kind == SERVICE_ACCOUNT_KIND:
            return cls.SERVICE_ACCOUNT
        return cls.OTHER


class Subject(BaseModel):
    """An identity referenced by a RoleBinding.

    Two subjects are equal when kind, namespace and name match exactly.
    The API group is kept so that a binding written back to the cluster
    is unchanged apart from the removed subjects.

    Attributes:
        kind: Subject kind (User, Group, ServiceAccount or any other string).
        name: Subject name.
        namespace: Namespace, required for ServiceAccount subjects.
        api_group: API group of the subject reference.

    Example:
        >>> Subject(kind="User", name="alice") == Subject(
        ...     kind="User", name="alice", api_group="rbac.authorization.k8s.io"
        ... )
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(..., min_length=1, description="Subject kind")
    name: str = Field(..., min_length=1, description="Subject name")
    namespace: str | None = Field(default=None, description="Subject namespace")
    api_group: str | None = Field(default=None, description="Subject API group")

    @model_validator(mode="after")
    def service_account_requires_namespace(self) -> Self:
        """Reject ServiceAccount subjects without a namespace.

        Raises:
            ValueError: If kind is ServiceAccount and namespace is empty.
        """
        if self.kind == SERVICE_ACCOUNT_KIND and not self.namespace:
            msg = f"ServiceAccount subject '{self.name}' requires a namespace"
            raise ValueError(msg)
        return self

    @property
    def identity(self) -> tuple[str, str | None, str]:
        """The (kind, namespace, name) tuple that defines equality."""
        return (self.kind, self.namespace, self.name)

    @property
    def category(self) -> SubjectCategory:
        """Category of this subject's kind."""
        return SubjectCategory.from_kind(self.kind)

    @property
    def display_name(self) -> str:
        """Name used in reports.

        Users and groups render as their name, service accounts as
        ``namespace/name`` and anything else as ``kind/namespace/name``.
        """
        category = self.category
        if category == SubjectCategory.SERVICE_ACCOUNT:
            return f"{self.namespace}/{self.name}"
        if category == SubjectCategory.OTHER:
            return f"{self.kind}/{self.namespace or ''}/{self.name}"
        return self.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subject):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def to_k8s_dict(self) -> dict[str, Any]:
        """Convert to a K8s subject dict.

        Returns:
            Dictionary in RoleBinding ``subjects[]`` format.
        """
        result: dict[str, Any] = {"kind": self.kind, "name": self.name}
        if self.api_group is not None:
            result["apiGroup"] = self.api_group
        if self.namespace:
            result["namespace"] = self.namespace
        return result

    @classmethod
    def from_k8s_dict(
        cls,
        data: dict[str, Any],
        *,
        default_namespace: str | None = None,
    ) -> Subject:
        """Build a Subject from a K8s subject dict.

        The API server resolves a ServiceAccount subject without a namespace
        to the namespace of its RoleBinding; ``default_namespace`` applies
        the same rule.

        Args:
            data: Dictionary in RoleBinding ``subjects[]`` format.
            default_namespace: Namespace of the enclosing RoleBinding.

        Returns:
            The parsed Subject.
        """
        namespace = data.get("namespace") or None
        if namespace is None and data["kind"] == SERVICE_ACCOUNT_KIND:
            namespace = default_namespace
        return cls(
            kind=data["kind"],
            name=data["name"],
            namespace=namespace,
            api_group=data.get("apiGroup"),
        )


class RoleRef(BaseModel):
    """Reference from a RoleBinding to a Role or ClusterRole.

    Attributes:
        kind: Referenced kind, usually "Role" or "ClusterRole".
        name: Name of the referenced role.
        api_group: API group of the referenced role.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(default="Role", description="Referenced role kind")
    name: str = Field(..., min_length=1, description="Referenced role name")
    api_group: str = Field(default=RBAC_API_GROUP, description="Referenced role API group")

    @property
    def is_cluster_scoped(self) -> bool:
        """True when the reference points to a ClusterRole."""
        return self.kind == CLUSTER_ROLE_KIND


class RoleBinding(BaseModel):
    """A namespaced RoleBinding and its subjects.

    Subjects may contain the same identity more than once; the list is
    kept as-is.

    Attributes:
        name: RoleBinding name (unique within its namespace).
        namespace: Namespace the RoleBinding lives in.
        role_ref: Role or ClusterRole the binding grants.
        subjects: Ordered subjects bound to the role.
        labels: Kubernetes labels.
        annotations: Kubernetes annotations.
        resource_version: Server resource version used for optimistic updates.
        source_manifest: Manifest as listed from the cluster, if any. Fields the
            model does not carry (ownerReferences, finalizers, ...) are
            written back from it unchanged.

    Example:
        >>> binding = RoleBinding(
        ...     name="edit",
        ...     namespace="team-a",
        ...     role_ref=RoleRef(kind="Role", name="editor"),
        ... )
        >>> binding.role_display_name
        'team-a/editor'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="RoleBinding name")
    namespace: str = Field(..., min_length=1, description="RoleBinding namespace")
    role_ref: RoleRef = Field(..., description="Referenced role")
    subjects: list[Subject] = Field(default_factory=list, description="Bound subjects")
    labels: dict[str, str] = Field(default_factory=dict, description="Kubernetes labels")
    annotations: dict[str, str] = Field(
        default_factory=dict,
        description="Kubernetes annotations",
    )
    resource_version: str | None = Field(
        default=None,
        description="Server resource version",
    )
    source_manifest: dict[str, Any] | None = Field(
        default=None,
        repr=False,
        description="Manifest as listed from the cluster",
    )

    @property
    def role_display_name(self) -> str:
        """Role name used in reports.

        Cluster-scoped roles render as their bare name, namespaced roles as
        ``namespace/name``.
        """
        if self.role_ref.is_cluster_scoped:
            return self.role_ref.name
        return f"{self.namespace}/{self.role_ref.name}"

    def with_subjects(self, subjects: list[Subject]) -> RoleBinding:
        """Return a copy of this binding carrying a different subject list.

        Args:
            subjects: Subjects for the copy.

        Returns:
            New RoleBinding; this instance is left unchanged.
        """
        return self.model_copy(update={"subjects": list(subjects)})

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to K8s RoleBinding manifest dict.

        A binding read from the cluster is rendered from its listed manifest
        with only the subjects replaced, so a full replace keeps every field
        the server returned.

        Returns:
            Dictionary representing a valid K8s RoleBinding manifest.
        """
        subjects = [s.to_k8s_dict() for s in self.subjects]
        if self.source_manifest is not None:
            manifest = copy.deepcopy(self.source_manifest)
            manifest["apiVersion"] = RBAC_API_VERSION
            manifest["kind"] = "RoleBinding"
            manifest["subjects"] = subjects
            return manifest

        metadata: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
        }
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version

        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "RoleBinding",
            "metadata": metadata,
            "roleRef": {
                "apiGroup": self.role_ref.api_group,
                "kind": self.role_ref.kind,
                "name": self.role_ref.name,
            },
            "subjects": subjects,
        }

    @classmethod
    def from_k8s_manifest(cls, manifest: dict[str, Any]) -> RoleBinding:
        """Build a RoleBinding from a K8s manifest dict.

        Args:
            manifest: Dictionary in K8s RoleBinding format.

        Returns:
            The parsed RoleBinding.
        """
        metadata = manifest.get("metadata", {})
        role_ref = manifest.get("roleRef", {})
        return cls(
            name=metadata["name"],
            namespace=metadata["namespace"],
            role_ref=RoleRef(
                kind=role_ref.get("kind", "Role"),
                name=role_ref["name"],
                api_group=role_ref.get("apiGroup", RBAC_API_GROUP),
            ),
            subjects=[
                Subject.from_k8s_dict(s, default_namespace=metadata["namespace"])
                for s in manifest.get("subjects") or []
            ],
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
            resource_version=metadata.get("resourceVersion"),
            source_manifest=copy.deepcopy(manifest),
        )


class RemovalRequest(BaseModel):
    """Users and groups to remove from every RoleBinding in a namespace.

    Only User and Group subjects are ever removal targets. An empty request
    is valid and removes nothing.

    Attributes:
        users: User names to remove.
        groups: Group names to remove.

    Example:
        >>> request = RemovalRequest(users=["alice"])
        >>> request.is_empty
        False
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    users: frozenset[str] = Field(default_factory=frozenset, description="User names")
    groups: frozenset[str] = Field(default_factory=frozenset, description="Group names")

    @property
    def is_empty(self) -> bool:
        """True when the request names no users and no groups."""
        return not self.users and not self.groups


__all__ = [
    "CLUSTER_ROLE_KIND",
    "GROUP_KIND",
    "RBAC_API_GROUP",
    "RBAC_API_VERSION",
    "SERVICE_ACCOUNT_KIND",
    "USER_KIND",
    "RemovalRequest",
    "RoleBinding",
    "RoleRef",
    "Subject",
    "SubjectCategory",
]
