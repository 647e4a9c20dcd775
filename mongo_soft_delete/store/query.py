"""
Lazy query and aggregate builders.

Read operations return a ``Query`` that can be refined with ``where`` before
it executes; aggregate operations return an ``Aggregate`` whose pipeline is
handed to the schema's aggregate hooks right before execution.
"""

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Type,
)

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from ..exceptions import SchemaError

if TYPE_CHECKING:
    from .model import Model

logger = logging.getLogger(__name__)

# Failures of the underlying store, handed to callbacks instead of raised
STORE_ERRORS = (PyMongoError, ValidationError)

_UNSET = object()


def run_operation(
    operation: Callable[[], Any], callback: Optional[Callable[..., Any]] = None
) -> Any:
    """
    Execute a store operation under the callback contract.

    Without a callback the result is returned and errors propagate. With a
    callback it is invoked as ``callback(error, result)``.
    """
    if callback is None:
        return operation()

    try:
        result = operation()
    except STORE_ERRORS as exc:
        callback(exc, None)
        return None

    callback(None, result)
    return result


class Query:
    """Chainable read query against a model's collection."""

    OPERATIONS = ("find", "find_one", "count", "count_documents")

    def __init__(
        self,
        model: Type["Model"],
        op: str,
        conditions: Optional[Mapping[str, Any]] = None,
        projection: Optional[Any] = None,
        options: Optional[Mapping[str, Any]] = None,
    ):
        if op not in self.OPERATIONS:
            raise ValueError(f"Unsupported query operation {op!r}")
        self.model = model
        self.op = op
        self._conditions: Dict[str, Any] = dict(conditions or {})
        self._projection = projection
        self._options: Dict[str, Any] = dict(options or {})
        self._path: Optional[str] = None

    def where(self, path: Any = None, value: Any = _UNSET) -> "Query":
        """
        Add conditions.

        ``where({"a": 1})`` merges the mapping; ``where("a", 1)`` adds one
        condition; ``where("a")`` selects a path for a following ``eq``.
        """
        if isinstance(path, Mapping):
            for key, condition in path.items():
                self._add_condition(key, condition)
        elif isinstance(path, str):
            self._path = path
            if value is not _UNSET:
                self._add_condition(path, value)
        elif path is not None:
            raise TypeError(f"where() expects a path or a mapping, got {path!r}")
        return self

    def eq(self, value: Any) -> "Query":
        """Require the path selected by ``where`` to equal ``value``."""
        if self._path is None:
            raise SchemaError("eq() must follow where(path)", self.model.model_name)
        self._add_condition(self._path, {"$eq": value})
        return self

    def _add_condition(self, path: str, condition: Any) -> None:
        # Conditions on a path the caller already constrained are ANDed
        if path not in self._conditions:
            self._conditions[path] = condition
        elif self._conditions[path] != condition:
            # The caller's $and list is never modified
            clauses = list(self._conditions.get("$and", []))
            self._conditions["$and"] = clauses + [{path: condition}]

    def get_filter(self) -> Dict[str, Any]:
        """Return a copy of the current conditions."""
        return dict(self._conditions)

    def exec(self, callback: Optional[Callable[..., Any]] = None) -> Any:
        """
        Execute the query.

        Returns:
            A list of documents for ``find``, a document or None for
            ``find_one``, an int for the count operations
        """
        return run_operation(self._execute, callback)

    def _execute(self) -> Any:
        collection = self.model.get_collection()
        conditions = self.get_filter()
        logger.debug("%s.%s %r", self.model.model_name, self.op, conditions)

        if self.op == "find":
            cursor = collection.find(conditions, self._projection, **self._options)
            return [self.model.hydrate(raw) for raw in cursor]
        if self.op == "find_one":
            raw = collection.find_one(conditions, self._projection, **self._options)
            return None if raw is None else self.model.hydrate(raw)
        return collection.count_documents(conditions, **self._options)

    def __iter__(self) -> Iterator[Any]:
        result = self.exec()
        if isinstance(result, list):
            return iter(result)
        return iter(() if result is None else (result,))

    def __repr__(self) -> str:
        return f"<Query {self.model.model_name}.{self.op} {self._conditions!r}>"


class Aggregate:
    """Aggregation pipeline whose aggregate hooks run at execution."""

    def __init__(
        self,
        model: Type["Model"],
        pipeline: Optional[List[Mapping[str, Any]]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ):
        self.model = model
        self._pipeline: List[Any] = list(pipeline or [])
        self._options: Dict[str, Any] = dict(options or {})

    def pipeline(self) -> List[Any]:
        """The pipeline stages; hooks edit this list in place."""
        return self._pipeline

    def append(self, *stages: Mapping[str, Any]) -> "Aggregate":
        self._pipeline.extend(stages)
        return self

    def exec(self, callback: Optional[Callable[..., Any]] = None) -> Any:
        """Run the aggregate hooks, then the pipeline; returns the result list."""
        return run_operation(self._execute, callback)

    def _execute(self) -> List[Any]:
        for hook in self.model.schema.hooks("aggregate"):
            hook(self)
        logger.debug("%s.aggregate %r", self.model.model_name, self._pipeline)
        collection = self.model.get_collection()
        return list(collection.aggregate(self._pipeline, **self._options))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.exec())

    def __repr__(self) -> str:
        return f"<Aggregate {self.model.model_name} {self._pipeline!r}>"
