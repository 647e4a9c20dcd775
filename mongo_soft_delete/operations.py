"""
Closed enumerations of the operations the soft delete layer can override.

Each overridable operation belongs to one ``OperationKind``; the kind decides
how the not-deleted predicate is applied and which variants are generated.
"""

from enum import Enum
from typing import Dict, Optional


class OperationKind(str, Enum):
    """How an operation receives the not-deleted predicate."""

    READ = "read"  # chained on the returned query
    MUTATION = "mutation"  # merged into the resolved conditions
    AGGREGATE = "aggregate"  # pipeline stage manipulation


class OverridableMethod(str, Enum):
    """Base operations eligible for variant generation."""

    COUNT = "count"
    COUNT_DOCUMENTS = "count_documents"
    FIND = "find"
    FIND_ONE = "find_one"
    FIND_ONE_AND_UPDATE = "find_one_and_update"
    UPDATE = "update"
    UPDATE_ONE = "update_one"
    UPDATE_MANY = "update_many"
    AGGREGATE = "aggregate"

    @property
    def kind(self) -> OperationKind:
        """Operation kind of this method."""
        if self in _READ_METHODS:
            return OperationKind.READ
        if self is OverridableMethod.AGGREGATE:
            return OperationKind.AGGREGATE
        return OperationKind.MUTATION

    @classmethod
    def lookup(cls, name: object) -> Optional["OverridableMethod"]:
        """
        Resolve a method name, accepting camelCase spellings.

        Args:
            name: Method name such as ``"find_one"`` or ``"findOne"``

        Returns:
            The matching member, or None for unrecognized names
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        name = _CAMEL_CASE_NAMES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return None


_READ_METHODS = frozenset(
    {
        OverridableMethod.COUNT,
        OverridableMethod.COUNT_DOCUMENTS,
        OverridableMethod.FIND,
        OverridableMethod.FIND_ONE,
    }
)

_CAMEL_CASE_NAMES: Dict[str, str] = {
    "countDocuments": "count_documents",
    "findOne": "find_one",
    "findOneAndUpdate": "find_one_and_update",
    "updateOne": "update_one",
    "updateMany": "update_many",
}


class Variant(str, Enum):
    """Generated call forms of a base operation, valued by their name suffix."""

    DEFAULT = ""
    DELETED = "_deleted"
    WITH_DELETED = "_with_deleted"

    def method_name(self, method: OverridableMethod) -> str:
        """Name under which this variant of ``method`` is installed."""
        return f"{method.value}{self.value}"

    @property
    def filters_deleted(self) -> bool:
        """Whether the variant hides soft-deleted documents."""
        return self is not Variant.WITH_DELETED
