"""
Generation of the filtered and unfiltered variants of base operations.

A registry maps each ``OperationKind`` to the factory that builds its
handlers, and to the variants that kind receives. Handlers are plain
functions taking the model class first; the store installs them as
classmethods.
"""

import logging
from typing import Any, Callable, Dict, Tuple

from ..arguments import UpdateArguments, split_callback
from ..config import SoftDeleteOptions
from ..operations import OperationKind, OverridableMethod, Variant
from .filters import (
    apply_not_deleted,
    not_deleted_conditions,
    prepend_not_deleted_stage,
    prepend_show_all_stage,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
HandlerFactory = Callable[[OverridableMethod, Variant, SoftDeleteOptions], Handler]


def _read_handler(
    method: OverridableMethod, variant: Variant, options: SoftDeleteOptions
) -> Handler:
    def handler(cls: Any, *args: Any) -> Any:
        base = cls.base_operation(method.value)
        if not variant.filters_deleted:
            return base(*args)

        query_args, callback = split_callback(args)
        query = apply_not_deleted(base(*query_args), options.use_ne_operator)
        if callback is not None:
            return query.exec(callback)
        return query

    return handler


def _mutation_handler(
    method: OverridableMethod, variant: Variant, options: SoftDeleteOptions
) -> Handler:
    def handler(cls: Any, *args: Any, **kwargs: Any) -> Any:
        base = cls.base_operation(method.value)
        if not variant.filters_deleted:
            return base(*args, **kwargs)

        call = UpdateArguments.resolve(*args, **kwargs)
        call = call.with_conditions(not_deleted_conditions(call.conditions))
        return base(**call.as_kwargs())

    return handler


def _aggregate_handler(
    method: OverridableMethod, variant: Variant, options: SoftDeleteOptions
) -> Handler:
    if variant.filters_deleted:
        rewrite = prepend_not_deleted_stage
    else:
        rewrite = prepend_show_all_stage

    def handler(cls: Any, pipeline: Any = None, *args: Any) -> Any:
        base = cls.base_operation(method.value)
        if callable(pipeline):
            return base(rewrite(None), pipeline, *args)
        return base(rewrite(pipeline), *args)

    return handler


HANDLER_FACTORIES: Dict[OperationKind, HandlerFactory] = {
    OperationKind.READ: _read_handler,
    OperationKind.MUTATION: _mutation_handler,
    OperationKind.AGGREGATE: _aggregate_handler,
}

# The plain aggregate is filtered by the pre-aggregate hook instead
VARIANTS_BY_KIND: Dict[OperationKind, Tuple[Variant, ...]] = {
    OperationKind.READ: tuple(Variant),
    OperationKind.MUTATION: tuple(Variant),
    OperationKind.AGGREGATE: (Variant.DELETED, Variant.WITH_DELETED),
}


def generate_variants(options: SoftDeleteOptions) -> Dict[str, Handler]:
    """
    Build the statics for every overridden base operation.

    Args:
        options: Resolved plugin options

    Returns:
        Mapping of static name (``find``, ``find_deleted``,
        ``find_with_deleted``, ...) to handler
    """
    statics: Dict[str, Handler] = {}

    for method in options.override_methods:
        factory = HANDLER_FACTORIES[method.kind]
        for variant in VARIANTS_BY_KIND[method.kind]:
            name = variant.method_name(method)
            handler = factory(method, variant, options)
            handler.__name__ = name
            handler.__qualname__ = name
            statics[name] = handler

    logger.debug("Generated soft delete statics: %s", ", ".join(statics))
    return statics
