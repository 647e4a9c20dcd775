"""
Soft delete actions for single documents and whole collections.

Deletion only ever moves a document from alive to deleted; nothing here
clears the markers again.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from pymongo.results import UpdateResult

from ..config import SoftDeleteOptions
from ..exceptions import MissingArgumentError
from ..store import Schema
from .fields import DELETED, DELETED_AT

logger = logging.getLogger(__name__)

_MISSING = object()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def make_instance_delete(
    schema: Schema, options: SoftDeleteOptions
) -> Callable[..., Any]:
    """Build the ``delete`` method of documents."""

    def delete(self: Any, callback: Optional[Callable[..., Any]] = None) -> Any:
        """
        Soft delete this document and save it.

        Args:
            callback: Optional ``callback(error, document)``, forwarded to save

        Returns:
            Whatever ``save`` returns
        """
        self.deleted = self._id
        if schema.path(DELETED_AT) is not None:
            self.deleted_at = _now()

        logger.debug("Soft deleting %s %r", self.model_name, self._id)

        if options.validate_before_delete is False:
            return self.save({"validate_before_save": False}, callback)
        return self.save(callback)

    return delete


def make_collection_delete(schema: Schema) -> Callable[..., Any]:
    """Build the ``delete`` static of models."""

    def delete(
        cls: Any,
        conditions: Mapping[str, Any],
        callback: Optional[Callable[..., Any]] = None,
    ) -> Any:
        """
        Soft delete every document matching ``conditions``.

        Every match gets ``deleted`` set to ``conditions["_id"]``, so the
        marker only identifies the document when a single id is targeted.

        Args:
            conditions: Filter selecting the documents to delete
            callback: Optional ``callback(error, result)``

        Returns:
            pymongo ``UpdateResult``

        Raises:
            MissingArgumentError: If conditions is not a mapping
        """
        if not isinstance(conditions, Mapping):
            raise MissingArgumentError(
                "Conditions are mandatory and must be a mapping.", cls.model_name
            )

        payload: Dict[str, Any] = {DELETED: conditions.get("_id")}
        if schema.path(DELETED_AT) is not None:
            payload[DELETED_AT] = _now()

        # Already deleted matches stay reachable so repeated deletes succeed
        update = getattr(cls, "update_with_deleted", None)
        if update is None:
            update = cls.update_many
        result = update(conditions, payload, {"multi": True}, callback)

        if isinstance(result, UpdateResult):
            logger.info(
                "Soft deleted %s documents: matched=%d modified=%d",
                cls.model_name,
                result.matched_count,
                result.modified_count,
            )
        return result

    return delete


def delete_by_id(
    cls: Any,
    id: Any = _MISSING,
    deleted_by: Any = None,
    callback: Optional[Callable[..., Any]] = None,
) -> Any:
    """
    Soft delete the document with the given identifier.

    Args:
        id: Identifier of the document
        deleted_by: Accepted for call compatibility; a callable here is
            taken as the callback
        callback: Optional ``callback(error, result)``

    Raises:
        MissingArgumentError: If no identifier is given or it is a callable
    """
    if id is _MISSING or callable(id):
        raise MissingArgumentError(
            "First argument is mandatory and must not be a function.",
            cls.model_name,
        )

    if callable(deleted_by) and callback is None:
        callback, deleted_by = deleted_by, None
    if deleted_by is not None:
        logger.debug("delete_by_id(%r) requested by %r", id, deleted_by)

    return cls.delete({"_id": id}, callback)
