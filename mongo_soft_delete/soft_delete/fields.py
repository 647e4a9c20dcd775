"""Deletion marker fields added to every soft-deletable schema."""

from datetime import datetime
from typing import Any

from ..config import IndexFields
from ..store import FieldSpec, Schema

DELETED = "deleted"
DELETED_AT = "deleted_at"


def add_deletion_fields(schema: Schema, index_fields: IndexFields) -> None:
    """
    Add ``deleted`` and ``deleted_at`` to a schema.

    ``deleted`` holds the document's own identifier once deleted, so it takes
    the schema's ``_id`` type. Both fields default to None (alive).

    Args:
        schema: Schema to extend
        index_fields: Which of the two fields get a secondary index
    """
    schema.add(
        {
            DELETED: FieldSpec(
                type=schema.id_type, default=None, index=index_fields.deleted
            ),
            DELETED_AT: FieldSpec(
                type=datetime, default=None, index=index_fields.deleted_at
            ),
        }
    )


def normalize_deleted_marker(document: Any) -> None:
    """
    Pre-save hook: a falsy ``deleted`` marker on the saved document means alive.

    A marker equal to the document's own ``_id`` is kept even when falsy, since
    ids such as ``0`` or ``""`` are valid.
    """
    marker = getattr(document, DELETED, None)
    if marker is None or marker:
        return
    doc_id = getattr(document, "_id", None)
    if type(marker) is type(doc_id) and marker == doc_id:
        return
    document.deleted = None
