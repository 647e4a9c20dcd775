"""
Mongo Soft Delete - soft delete for MongoDB document models.

Instead of physically removing documents, models using this package mark
them as deleted and transparently rewrite reads, updates, and aggregations so
deleted documents are excluded by default, while remaining reachable through
explicit ``*_with_deleted`` variants.

Key Features
------------
* **Deletion markers**: ``deleted`` and ``deleted_at`` fields, optionally indexed
* **Filtered variants**: ``find``, ``find_deleted``, ``find_with_deleted`` and
  the same for counts, updates, and aggregations
* **Soft delete actions**: ``doc.delete()``, ``Model.delete(conditions)``,
  ``Model.delete_by_id(id)``

Quick Start
-----------
>>> from pymongo import MongoClient
>>> from mongo_soft_delete import Schema, model, soft_delete_plugin
>>>
>>> schema = Schema({"name": str})
>>> schema.plugin(soft_delete_plugin, {"overrideMethods": "all"})
>>> Pet = model("Pet", schema, MongoClient().shop.pets)
>>>
>>> Pet.delete_by_id(pet_id)
>>> Pet.find().exec()               # deleted pets are hidden
>>> Pet.find_with_deleted().exec()  # every pet
"""

__version__ = "1.0.0"

from .arguments import CallShape, UpdateArguments, parse_update_arguments
from .config import IndexFields, SoftDeleteOptions, configure, get_options, set_options
from .exceptions import MissingArgumentError, SchemaError, SoftDeleteError
from .operations import OperationKind, OverridableMethod, Variant
from .soft_delete import soft_delete_plugin
from .store import FieldSpec, Model, Query, Schema, model

__all__ = [
    # Store
    "Schema",
    "FieldSpec",
    "Model",
    "Query",
    "model",
    # Plugin
    "soft_delete_plugin",
    # Configuration
    "SoftDeleteOptions",
    "IndexFields",
    "configure",
    "get_options",
    "set_options",
    # Arguments
    "parse_update_arguments",
    "UpdateArguments",
    "CallShape",
    # Operations
    "OperationKind",
    "OverridableMethod",
    "Variant",
    # Exceptions
    "SoftDeleteError",
    "MissingArgumentError",
    "SchemaError",
]
