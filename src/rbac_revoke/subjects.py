"""Subject classification and removal.

Example:
    >>> from rbac_revoke.schemas import RemovalRequest, Subject
    >>> from rbac_revoke.subjects import remove_subjects
    >>> subjects = [Subject(kind="User", name="alice"), Subject(kind="User", name="bob")]
    >>> [s.name for s in remove_subjects(subjects, RemovalRequest(users=["alice"]))]
    ['bob']
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbac_revoke.schemas import (
    GROUP_KIND,
    USER_KIND,
    Subject,
    SubjectCategory,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rbac_revoke.schemas import RemovalRequest


def classify_subjects(subjects: Iterable[Subject]) -> dict[SubjectCategory, set[str]]:
    """Group subject display names into the four category buckets.

    Args:
        subjects: Subjects to classify.

    Returns:
        Mapping of every SubjectCategory to the set of display names in it.
        Categories with no subjects map to an empty set.

    Example:
        >>> buckets = classify_subjects([Subject(kind="ServiceAccount", namespace="ns", name="sa")])
        >>> buckets[SubjectCategory.SERVICE_ACCOUNT]
        {'ns/sa'}
    """
    buckets: dict[SubjectCategory, set[str]] = {category: set() for category in SubjectCategory}
    for subject in subjects:
        buckets[subject.category].add(subject.display_name)
    return buckets


def _is_targeted(subject: Subject, request: RemovalRequest) -> bool:
    # Namespace plays no part: users and groups are cluster-wide identities.
    if subject.kind == USER_KIND:
        return subject.name in request.users
    if subject.kind == GROUP_KIND:
        return subject.name in request.groups
    return False


def remove_subjects(subjects: Sequence[Subject], request: RemovalRequest) -> list[Subject]:
    """Remove every occurrence of the requested users and groups.

    ServiceAccount and other subjects are never removed. Surviving subjects
    keep their relative order; the input sequence is not modified.

    Args:
        subjects: A binding's subject list (may contain duplicates).
        request: Users and groups to remove.

    Returns:
        New list of the subjects that remain.
    """
    return [subject for subject in subjects if not _is_targeted(subject, request)]


__all__ = [
    "classify_subjects",
    "remove_subjects",
]
