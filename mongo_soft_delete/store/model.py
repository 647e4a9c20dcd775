"""
Document models bound to pymongo collections.

``model()`` turns a ``Schema`` into a ``Model`` subclass. Schema statics are
installed as classmethods and schema methods as instance methods; a name used
by both dispatches on whether it is looked up on the class or an instance.
"""

import logging
import types
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from bson import ObjectId
from pymongo import ASCENDING, IndexModel, ReturnDocument
from pymongo.collection import Collection
from pymongo.results import UpdateResult

from ..arguments import UpdateArguments, read_arguments
from ..exceptions import SchemaError
from .query import Aggregate, Query, run_operation
from .schema import Schema

logger = logging.getLogger(__name__)

# Option keys interpreted here rather than forwarded to pymongo
_LOCAL_UPDATE_OPTIONS = ("multi", "new")


class dualmethod:
    """Descriptor dispatching to a static on the class and a method on instances."""

    def __init__(self, static: Callable[..., Any], method: Callable[..., Any]) -> None:
        self.static = static
        self.method = method

    def __get__(self, instance: Any, owner: Type[Any]) -> Callable[..., Any]:
        if instance is None:
            return types.MethodType(self.static, owner)
        return types.MethodType(self.method, instance)


def _as_update_document(update: Mapping[str, Any]) -> Dict[str, Any]:
    """Wrap a plain field mapping in ``$set``; operator documents pass through."""
    if any(key.startswith("$") for key in update):
        return dict(update)
    return {"$set": dict(update)}


def _update_kwargs(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {
        key: value
        for key, value in (options or {}).items()
        if key not in _LOCAL_UPDATE_OPTIONS
    }


def _noop_update_result() -> UpdateResult:
    return UpdateResult({"n": 0, "nModified": 0, "ok": 1.0}, acknowledged=True)


class Model:
    """
    Base class of schema-bound document models.

    Instances keep their fields in a plain dict exposed through attribute
    access; ``doc._id`` and ``doc.id`` both return the identifier.
    """

    schema: Schema = Schema()
    collection: Optional[Collection] = None
    model_name: str = "Model"

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **fields: Any):
        values = dict(data or {})
        values.update(fields)
        if "_id" not in values and "id" in values:
            values["_id"] = values.pop("id")

        doc: Dict[str, Any] = {
            name: spec.make_default() for name, spec in self.schema.fields.items()
        }
        doc.update(values)
        if doc.get("_id") is None and self.schema.id_type is ObjectId:
            doc["_id"] = ObjectId()

        object.__setattr__(self, "_doc", doc)

    def __getattr__(self, name: str) -> Any:
        doc = self.__dict__.get("_doc", {})
        if name == "id":
            name = "_id"
        if name in doc:
            return doc[name]
        raise AttributeError(f"{type(self).__name__!r} document has no field {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id":
            name = "_id"
        if name.startswith("_") and name != "_id":
            object.__setattr__(self, name, value)
        else:
            self._doc[name] = value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._doc.get('_id')!r}>"

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._doc)

    def validate(self) -> None:
        """
        Validate the document against its schema.

        Raises:
            pydantic.ValidationError: If a field has the wrong type or a
                required field is missing
        """
        self.schema.validator().model_validate(self._doc)

    def save(
        self,
        options: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callable[..., Any]] = None,
    ) -> Any:
        """
        Persist the document, inserting or replacing it by ``_id``.

        Pre-save hooks run first and receive the document itself.

        Args:
            options: ``{"validate_before_save": False}`` skips validation
            callback: Optional ``callback(error, document)``

        Returns:
            The saved document
        """
        if callable(options) and callback is None:
            callback, options = options, None
        validate = (options or {}).get("validate_before_save", True)

        def operation() -> "Model":
            for hook in self.schema.hooks("save"):
                hook(self)
            if self._doc.get("_id") is None:
                raise SchemaError(
                    "Documents must have an _id before saving", self.model_name
                )
            if validate is not False:
                self.validate()
            self.get_collection().replace_one(
                {"_id": self._doc["_id"]}, self._doc, upsert=True
            )
            logger.debug("Saved %s %r", self.model_name, self._doc["_id"])
            return self

        return run_operation(operation, callback)

    @classmethod
    def hydrate(cls, raw: Mapping[str, Any]) -> "Model":
        """Build a document from a raw stored mapping."""
        return cls(raw)

    @classmethod
    def bind(cls, collection: Collection) -> Type["Model"]:
        cls.collection = collection
        return cls

    @classmethod
    def get_collection(cls) -> Collection:
        """
        Return the bound collection.

        Raises:
            SchemaError: If the model is not bound to a collection
        """
        if cls.collection is None:
            raise SchemaError(
                f"Model {cls.model_name} is not bound to a collection",
                cls.model_name,
            )
        return cls.collection

    @classmethod
    def base_operation(cls, name: str) -> Callable[..., Any]:
        """
        Return the store's own implementation of ``name`` bound to ``cls``.

        Statics installed by plugins under the same name are bypassed.
        """
        return vars(Model)[name].__get__(None, cls)

    @classmethod
    def ensure_indexes(cls) -> List[str]:
        """Create the secondary indexes declared by the schema."""
        indexes = [
            IndexModel([(path, ASCENDING)]) for path in cls.schema.indexed_paths()
        ]
        if not indexes:
            return []
        return cls.get_collection().create_indexes(indexes)

    # Read operations return lazy queries

    @classmethod
    def find(cls, *args: Any) -> Any:
        """``find(conditions?, projection?, options?, callback?)``"""
        (conditions, projection, options), callback = read_arguments(args, 3)
        query = Query(cls, "find", conditions, projection, options)
        return query if callback is None else query.exec(callback)

    @classmethod
    def find_one(cls, *args: Any) -> Any:
        """``find_one(conditions?, projection?, options?, callback?)``"""
        (conditions, projection, options), callback = read_arguments(args, 3)
        query = Query(cls, "find_one", conditions, projection, options)
        return query if callback is None else query.exec(callback)

    @classmethod
    def count_documents(cls, *args: Any) -> Any:
        """``count_documents(conditions?, options?, callback?)``"""
        (conditions, options), callback = read_arguments(args, 2)
        query = Query(cls, "count_documents", conditions, None, options)
        return query if callback is None else query.exec(callback)

    @classmethod
    def count(cls, *args: Any) -> Any:
        """Same as ``count_documents``."""
        (conditions, options), callback = read_arguments(args, 2)
        query = Query(cls, "count", conditions, None, options)
        return query if callback is None else query.exec(callback)

    # Update operations execute immediately

    @classmethod
    def update_one(cls, *args: Any, **kwargs: Any) -> Any:
        """``update_one(conditions?, update?, options?, callback?)``"""
        call = UpdateArguments.resolve(*args, **kwargs)
        return cls._update(call, multi=False)

    @classmethod
    def update_many(cls, *args: Any, **kwargs: Any) -> Any:
        """``update_many(conditions?, update?, options?, callback?)``"""
        call = UpdateArguments.resolve(*args, **kwargs)
        return cls._update(call, multi=True)

    @classmethod
    def update(cls, *args: Any, **kwargs: Any) -> Any:
        """Update one document, or every match when ``options["multi"]`` is set."""
        call = UpdateArguments.resolve(*args, **kwargs)
        return cls._update(call, multi=bool((call.options or {}).get("multi")))

    @classmethod
    def _update(cls, call: UpdateArguments, multi: bool) -> Any:
        def operation() -> UpdateResult:
            if not call.update:
                return _noop_update_result()
            collection = cls.get_collection()
            method = collection.update_many if multi else collection.update_one
            return method(
                dict(call.conditions or {}),
                _as_update_document(call.update),
                **_update_kwargs(call.options),
            )

        return run_operation(operation, call.callback)

    @classmethod
    def find_one_and_update(cls, *args: Any, **kwargs: Any) -> Any:
        """
        Update the first match and return it.

        ``options["new"]`` returns the document as it is after the update.
        """
        call = UpdateArguments.resolve(*args, **kwargs)
        options = dict(call.options or {})

        def operation() -> Optional[Model]:
            conditions = dict(call.conditions or {})
            collection = cls.get_collection()
            if not call.update:
                raw = collection.find_one(conditions, options.get("projection"))
            else:
                return_document = ReturnDocument.BEFORE
                if options.get("new"):
                    return_document = ReturnDocument.AFTER
                raw = collection.find_one_and_update(
                    conditions,
                    _as_update_document(call.update),
                    return_document=return_document,
                    **_update_kwargs(options),
                )
            return None if raw is None else cls.hydrate(raw)

        return run_operation(operation, call.callback)

    @classmethod
    def aggregate(
        cls, pipeline: Any = None, options: Any = None, callback: Any = None
    ) -> Any:
        """``aggregate(pipeline?, options?, callback?)``"""
        if callable(pipeline):
            pipeline, callback = None, pipeline
        if callable(options):
            options, callback = None, options
        aggregate = Aggregate(cls, pipeline, options)
        return aggregate if callback is None else aggregate.exec(callback)


def model(
    name: str, schema: Schema, collection: Optional[Collection] = None
) -> Type[Model]:
    """
    Build a model class from a schema.

    Args:
        name: Model name
        schema: Schema with any plugins already applied
        collection: pymongo collection to bind; may be bound later with
            ``Model.bind``

    Returns:
        New ``Model`` subclass
    """
    attrs: Dict[str, Any] = {
        "schema": schema,
        "collection": collection,
        "model_name": name,
    }
    for static_name, static in schema.statics.items():
        if static_name in schema.methods:
            attrs[static_name] = dualmethod(static, schema.methods[static_name])
        else:
            attrs[static_name] = classmethod(static)
    for method_name, method in schema.methods.items():
        attrs.setdefault(method_name, method)

    return type(name, (Model,), attrs)
