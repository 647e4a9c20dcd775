"""Shared fixtures for Mongo Soft Delete tests."""

import mongomock
import pytest
from bson import ObjectId

from mongo_soft_delete import Schema, model, set_options, soft_delete_plugin


@pytest.fixture(autouse=True)
def reset_options():
    """Keep the process-wide default options isolated between tests."""
    set_options(None)
    yield
    set_options(None)


@pytest.fixture
def collection():
    """Create an in-memory pymongo-compatible collection."""
    return mongomock.MongoClient().shop.pets


@pytest.fixture
def make_model(collection):
    """Build a model with the soft delete plugin applied."""

    def factory(options=None, definition=None, id_type=ObjectId, name="Pet"):
        schema = Schema(definition or {"name": str, "species": str}, id_type=id_type)
        schema.plugin(soft_delete_plugin, {} if options is None else options)
        return model(name, schema, collection)

    return factory


@pytest.fixture
def Pet(make_model):
    """Model with every method overridden."""
    return make_model({"overrideMethods": "all"})


@pytest.fixture
def populated(Pet):
    """Two alive dogs, one alive cat, and one deleted dog."""
    rex = Pet(name="Rex", species="dog").save()
    fido = Pet(name="Fido", species="dog").save()
    tom = Pet(name="Tom", species="cat").save()
    old = Pet(name="Old Yeller", species="dog").save()
    old.delete()
    return {"rex": rex, "fido": fido, "tom": tom, "old": old}
