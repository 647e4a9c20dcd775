"""
Visibility filtering for reads, mutations, and aggregate pipelines.

Pipeline stages are compared by their serialized form, so only a stage with
exactly the canonical shape is recognised as already filtering.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from bson import json_util

from ..store import Aggregate, Query
from .fields import DELETED_AT

logger = logging.getLogger(__name__)

NOT_DELETED_STAGE: Dict[str, Any] = {"$match": {DELETED_AT: {"$eq": None}}}

# Leading stage that asks the aggregate hook to skip filtering
SHOW_ALL_DOCUMENTS_STAGE: Dict[str, Any] = {"$match": {"showAllDocuments": "true"}}

_NOT_DELETED_SIGNATURE = json_util.dumps(NOT_DELETED_STAGE)
_SHOW_ALL_SIGNATURE = json_util.dumps(SHOW_ALL_DOCUMENTS_STAGE)


def _signature(stage: Any) -> str:
    return json_util.dumps(stage)


def is_not_deleted_stage(stage: Any) -> bool:
    return _signature(stage) == _NOT_DELETED_SIGNATURE


def is_show_all_stage(stage: Any) -> bool:
    return _signature(stage) == _SHOW_ALL_SIGNATURE


def apply_not_deleted(query: Query, use_ne_operator: bool = True) -> Query:
    """
    Chain the not-deleted predicate onto a read query.

    The predicate is ANDed with whatever the caller already asked for.

    Args:
        query: Query returned by the store
        use_ne_operator: Use the ``{"$eq": None}`` operator form rather than
            the literal ``None`` form; both match the same documents

    Returns:
        The same query, for chaining
    """
    if use_ne_operator:
        return query.where(DELETED_AT).eq(None)
    return query.where({DELETED_AT: None})


def not_deleted_conditions(
    conditions: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Copy of mutation conditions restricted to documents not deleted."""
    result = dict(conditions or {})
    result[DELETED_AT] = {"$eq": None}
    return result


def prepend_not_deleted_stage(pipeline: Optional[List[Any]]) -> List[Any]:
    """New pipeline starting with the not-deleted stage, added at most once."""
    stages = list(pipeline or [])
    if not stages or not is_not_deleted_stage(stages[0]):
        stages.insert(0, copy.deepcopy(NOT_DELETED_STAGE))
    return stages


def prepend_show_all_stage(pipeline: Optional[List[Any]]) -> List[Any]:
    """New pipeline starting with the bypass sentinel."""
    return [copy.deepcopy(SHOW_ALL_DOCUMENTS_STAGE)] + list(pipeline or [])


def filter_aggregate(aggregate: Aggregate) -> None:
    """
    Pre-aggregate hook applied to every aggregate execution.

    A leading bypass sentinel is removed and nothing is injected; a leading
    not-deleted stage is left alone; otherwise the not-deleted stage is
    prepended.
    """
    stages = aggregate.pipeline()
    first = stages[0] if stages else None

    if is_not_deleted_stage(first):
        return
    if is_show_all_stage(first):
        stages.pop(0)
        logger.debug(
            "Aggregate on %s includes deleted documents", aggregate.model.model_name
        )
        return
    stages.insert(0, copy.deepcopy(NOT_DELETED_STAGE))
