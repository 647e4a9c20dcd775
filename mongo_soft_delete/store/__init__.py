"""
Document store layer - schemas, models, and queries over pymongo collections.

Provides the schema registry, hook points, and base operations that the soft
delete plugin extends.
"""

from .model import Model, dualmethod, model
from .query import STORE_ERRORS, Aggregate, Query, run_operation
from .schema import FieldSpec, Schema

__all__ = [
    # Schema
    "Schema",
    "FieldSpec",
    # Models
    "Model",
    "model",
    "dualmethod",
    # Queries
    "Query",
    "Aggregate",
    "run_operation",
    "STORE_ERRORS",
]
