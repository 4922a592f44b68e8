"""Processing order for role bindings.

Bindings are processed in descending name order. The order does not change
which mutations happen, only the sequence in which they are applied and
reported, so repeated runs against the same bindings produce identical
output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rbac_revoke.schemas import RoleBinding


def order_bindings(bindings: Iterable[RoleBinding]) -> list[RoleBinding]:
    """Sort bindings by name, highest first.

    Args:
        bindings: Bindings as returned by the lister.

    Returns:
        New list sorted by name in reverse lexicographic order.

    Example:
        >>> [b.name for b in order_bindings(bindings)]  # names a, c, b
        ['c', 'b', 'a']
    """
    return sorted(bindings, key=lambda binding: binding.name, reverse=True)


__all__ = ["order_bindings"]
