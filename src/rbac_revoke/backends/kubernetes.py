"""Kubernetes RoleBinding backend.

Implements RoleBindingLister and MutationSink on top of the official
kubernetes client's RbacAuthorizationV1Api.

Example:
    >>> from rbac_revoke.backends.kubernetes import K8sRoleBindingBackend
    >>> from rbac_revoke.config import KubernetesClientConfig
    >>> backend = K8sRoleBindingBackend(KubernetesClientConfig(context="dev"))
    >>> backend.startup()
    >>> bindings = backend.list_role_bindings("team-a")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from rbac_revoke.backends.base import MutationSink, RoleBindingLister
from rbac_revoke.config import DEFAULT_NAMESPACE, KubernetesClientConfig
from rbac_revoke.errors import BackendError, ConfigurationError, MutationError
from rbac_revoke.schemas import RoleBinding
from rbac_revoke.tracing import sanitize_error_message

logger = structlog.get_logger(__name__)

SERVER_DRY_RUN = "All"

_IN_CLUSTER_NAMESPACE_FILE = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")


def sanitize_k8s_api_error(exc: Exception) -> str:
    """Describe a kubernetes client exception without its body or headers.

    Args:
        exc: Exception from the kubernetes client (ApiException expected).

    Returns:
        Sanitized message safe for logging and display.
    """
    status = getattr(exc, "status", None)
    reason = getattr(exc, "reason", None)

    if status is not None and reason is not None:
        return f"{reason} (HTTP {status})"
    if reason is not None:
        return str(reason)
    return sanitize_error_message(f"{type(exc).__name__}: {exc}")


def role_binding_from_k8s(resource: Any, api_client: Any = None) -> RoleBinding:
    """Convert a kubernetes client V1RoleBinding to a RoleBinding.

    The object is serialized to its manifest form first, so the RoleBinding
    keeps every field the server returned.

    Args:
        resource: V1RoleBinding from a list or read call.
        api_client: ApiClient used for serialization. A new one is created
            if None.

    Returns:
        The converted RoleBinding.
    """
    if api_client is None:
        from kubernetes.client import ApiClient

        api_client = ApiClient()
    return RoleBinding.from_k8s_manifest(api_client.sanitize_for_serialization(resource))


def load_client_config(config: KubernetesClientConfig) -> None:
    """Load kubernetes client configuration.

    Order: explicit kubeconfig path, in-cluster configuration, then the
    default kubeconfig (~/.kube/config).

    Args:
        config: Client configuration.

    Raises:
        ConfigurationError: If no configuration can be loaded.
    """
    from kubernetes import config as k8s_config

    try:
        if config.kubeconfig_path:
            k8s_config.load_kube_config(
                config_file=config.kubeconfig_path,
                context=config.context,
            )
            logger.debug(
                "kubeconfig.loaded",
                kubeconfig_path=config.kubeconfig_path,
                context=config.context,
            )
            return
        try:
            k8s_config.load_incluster_config()
            logger.debug("kubeconfig.in_cluster")
        except k8s_config.ConfigException:
            k8s_config.load_kube_config(context=config.context)
            logger.debug("kubeconfig.default_loaded", context=config.context)
    except Exception as e:
        raise ConfigurationError(
            f"Unable to load Kubernetes configuration: {sanitize_error_message(str(e))}"
        ) from e


def resolve_namespace(config: KubernetesClientConfig) -> str:
    """Find the namespace of the active kubeconfig context.

    Falls back to the in-cluster service account namespace, then to
    "default".

    Args:
        config: Client configuration.

    Returns:
        Namespace name.
    """
    from kubernetes import config as k8s_config

    try:
        contexts, active = k8s_config.list_kube_config_contexts(
            config_file=config.kubeconfig_path,
        )
    except Exception:
        # No usable kubeconfig; the in-cluster file may still answer.
        contexts, active = [], None

    if config.context:
        active = next((c for c in contexts if c.get("name") == config.context), active)

    namespace = ((active or {}).get("context") or {}).get("namespace")
    if namespace:
        return str(namespace)

    if _IN_CLUSTER_NAMESPACE_FILE.exists():
        in_cluster = _IN_CLUSTER_NAMESPACE_FILE.read_text().strip()
        if in_cluster:
            return in_cluster

    return DEFAULT_NAMESPACE


class K8sRoleBindingBackend(RoleBindingLister, MutationSink):
    """RoleBinding lister and mutation sink backed by the Kubernetes API.

    Attributes:
        config: Client configuration.

    Example:
        >>> backend = K8sRoleBindingBackend()
        >>> backend.startup()
        >>> backend.delete_role_binding("team-a", "edit", dry_run=True)
    """

    def __init__(
        self,
        config: KubernetesClientConfig | None = None,
        *,
        api: Any = None,
    ) -> None:
        """Initialize the backend.

        Args:
            config: Client configuration. Uses defaults if None.
            api: Pre-built RbacAuthorizationV1Api. When given, startup()
                does not need to be called.
        """
        self.config = config or KubernetesClientConfig()
        self._api = api

    def startup(self) -> None:
        """Load client configuration and create the RBAC API client.

        Raises:
            ConfigurationError: If no configuration can be loaded.
        """
        from kubernetes import client

        load_client_config(self.config)
        self._api = client.RbacAuthorizationV1Api()

    def _ensure_initialized(self) -> Any:
        if self._api is None:
            raise ConfigurationError("Backend not initialized. Call startup() first.")
        return self._api

    def _request_kwargs(self, dry_run: bool = False) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.config.request_timeout is not None:
            kwargs["_request_timeout"] = self.config.request_timeout
        if dry_run:
            kwargs["dry_run"] = SERVER_DRY_RUN
        return kwargs

    def list_role_bindings(self, namespace: str) -> list[RoleBinding]:
        """List every RoleBinding in a namespace.

        Raises:
            BackendError: If the API call or conversion fails.
        """
        from kubernetes.client import ApiClient

        api = self._ensure_initialized()
        try:
            response = api.list_namespaced_role_binding(namespace, **self._request_kwargs())
            api_client = ApiClient()
            bindings = [role_binding_from_k8s(item, api_client) for item in response.items]
        except Exception as e:
            reason = sanitize_k8s_api_error(e)
            logger.error("rolebinding.list_failed", namespace=namespace, reason=reason)
            raise BackendError(namespace, reason=reason) from e

        logger.debug("rolebinding.listed", namespace=namespace, count=len(bindings))
        return bindings

    def update_role_binding(self, binding: RoleBinding, *, dry_run: bool = False) -> None:
        """Replace a RoleBinding with its filtered state.

        The resourceVersion read at list time is sent along, so a binding
        changed concurrently is rejected instead of overwritten.

        Raises:
            MutationError: If the API rejects the update.
        """
        api = self._ensure_initialized()
        try:
            api.replace_namespaced_role_binding(
                binding.name,
                binding.namespace,
                binding.to_k8s_manifest(),
                **self._request_kwargs(dry_run),
            )
        except Exception as e:
            reason = sanitize_k8s_api_error(e)
            logger.error(
                "rolebinding.update_failed",
                binding=binding.name,
                namespace=binding.namespace,
                reason=reason,
            )
            raise MutationError(
                "update", binding.name, namespace=binding.namespace, reason=reason
            ) from e

    def delete_role_binding(self, namespace: str, name: str, *, dry_run: bool = False) -> None:
        """Delete a RoleBinding by name.

        Raises:
            MutationError: If the API rejects the deletion.
        """
        api = self._ensure_initialized()
        try:
            api.delete_namespaced_role_binding(name, namespace, **self._request_kwargs(dry_run))
        except Exception as e:
            reason = sanitize_k8s_api_error(e)
            logger.error(
                "rolebinding.delete_failed",
                binding=name,
                namespace=namespace,
                reason=reason,
            )
            raise MutationError("delete", name, namespace=namespace, reason=reason) from e


__all__ = [
    "K8sRoleBindingBackend",
    "load_client_config",
    "resolve_namespace",
    "role_binding_from_k8s",
    "sanitize_k8s_api_error",
]
