"""Schema plugin wiring the soft delete layer into a model."""

import logging
from typing import Any, Mapping, Optional, Union

from ..config import SoftDeleteOptions
from ..store import Schema
from .fields import add_deletion_fields, normalize_deleted_marker
from .filters import filter_aggregate
from .mutators import delete_by_id, make_collection_delete, make_instance_delete
from .variants import generate_variants

logger = logging.getLogger(__name__)


def soft_delete_plugin(
    schema: Schema,
    options: Union[SoftDeleteOptions, Mapping[str, Any], None] = None,
) -> None:
    """
    Add soft delete support to a schema.

    Adds the deletion marker fields, a pre-save hook, the ``delete`` and
    ``delete_by_id`` statics, and the instance ``delete`` method. When any
    methods are overridden it also adds their variants and a pre-aggregate
    hook that filters every aggregate pipeline.

    Usage:
        schema = Schema({"name": str})
        schema.plugin(soft_delete_plugin, {"overrideMethods": "all"})

    Args:
        schema: Schema to extend
        options: ``SoftDeleteOptions``, a mapping of option values, or None
            for the process-wide defaults
    """
    resolved = SoftDeleteOptions.from_options(options)
    logger.debug("Applying soft delete plugin with %r", resolved.to_dict())

    schema.soft_delete_options = resolved
    add_deletion_fields(schema, resolved.index_fields)
    schema.pre("save", normalize_deleted_marker)

    if resolved.override_methods:
        schema.pre("aggregate", filter_aggregate)
        schema.statics.update(generate_variants(resolved))

    schema.methods["delete"] = make_instance_delete(schema, resolved)
    schema.statics["delete"] = make_collection_delete(schema)
    schema.statics["delete_by_id"] = delete_by_id


def get_plugin_options(schema: Schema) -> Optional[SoftDeleteOptions]:
    """Options the plugin was applied with, or None if it was not applied."""
    return getattr(schema, "soft_delete_options", None)
