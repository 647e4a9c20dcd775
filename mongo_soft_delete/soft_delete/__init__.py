"""
Soft Delete Module - deletion markers and visibility filtering.

Provides the schema plugin, the filter injection helpers, and the variant
generator that hide soft-deleted documents from reads, updates, and
aggregations by default.
"""

from .fields import DELETED, DELETED_AT, add_deletion_fields
from .filters import (
    NOT_DELETED_STAGE,
    SHOW_ALL_DOCUMENTS_STAGE,
    apply_not_deleted,
    filter_aggregate,
    not_deleted_conditions,
    prepend_not_deleted_stage,
)
from .plugin import get_plugin_options, soft_delete_plugin
from .variants import generate_variants

__all__ = [
    # Plugin
    "soft_delete_plugin",
    "get_plugin_options",
    # Fields
    "DELETED",
    "DELETED_AT",
    "add_deletion_fields",
    # Filters
    "NOT_DELETED_STAGE",
    "SHOW_ALL_DOCUMENTS_STAGE",
    "apply_not_deleted",
    "filter_aggregate",
    "not_deleted_conditions",
    "prepend_not_deleted_stage",
    # Variants
    "generate_variants",
]
