"""
Schema definitions for the document store.

A schema declares typed fields with defaults and index flags, carries the
pre-execution hooks and the statics/methods that plugins contribute, and
derives a pydantic model used to validate documents before they are saved.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, create_model

HOOK_EVENTS = ("save", "aggregate")


class FieldSpec(BaseModel):
    """Declaration of a single schema field."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    type: Any = Field(Any, description="Python type of the field value")
    default: Any = Field(None, description="Default value, or a factory")
    index: bool = Field(False, description="Whether a secondary index is built")
    required: bool = Field(False, description="Whether a value must be present")

    def make_default(self) -> Any:
        """Produce the default value for a new document."""
        if callable(self.default):
            return self.default()
        return self.default


def _to_field_spec(definition: Any) -> FieldSpec:
    if isinstance(definition, FieldSpec):
        return definition
    if isinstance(definition, Mapping):
        return FieldSpec(**definition)
    return FieldSpec(type=definition)


class Schema:
    """
    Field, hook, and operation registry for a model.

    Usage:
        schema = Schema({"name": str, "status": {"type": str, "default": "new"}})
        schema.plugin(soft_delete_plugin, {"overrideMethods": "all"})
        Sample = model("Sample", schema, collection)
    """

    def __init__(
        self,
        definition: Optional[Mapping[str, Any]] = None,
        id_type: Type[Any] = ObjectId,
    ):
        """
        Initialize the schema.

        Args:
            definition: Mapping of field name to a type, a dict of FieldSpec
                attributes, or a FieldSpec
            id_type: Type of the ``_id`` field
        """
        self.id_type = id_type
        self.fields: Dict[str, FieldSpec] = {}
        self.statics: Dict[str, Callable[..., Any]] = {}
        self.methods: Dict[str, Callable[..., Any]] = {}
        self._hooks: Dict[str, List[Callable[[Any], None]]] = {
            event: [] for event in HOOK_EVENTS
        }
        self._validator: Optional[Type[BaseModel]] = None

        if definition:
            self.add(definition)

    def add(self, definition: Mapping[str, Any]) -> "Schema":
        """Add or replace fields."""
        for name, spec in definition.items():
            self.fields[name] = _to_field_spec(spec)
        self._validator = None
        return self

    def path(self, name: str) -> Optional[FieldSpec]:
        """Return the declaration of ``name``, or None if it is not declared."""
        if name == "_id":
            return FieldSpec(type=self.id_type, required=True)
        return self.fields.get(name)

    def indexed_paths(self) -> List[str]:
        return [name for name, spec in self.fields.items() if spec.index]

    def pre(self, event: str, hook: Callable[[Any], None]) -> "Schema":
        """
        Register a hook to run before ``event``.

        Save hooks receive the document being saved; aggregate hooks receive
        the ``Aggregate`` about to execute.

        Raises:
            ValueError: If the event is not supported
        """
        if event not in self._hooks:
            raise ValueError(
                f"Unsupported hook event {event!r}; expected one of {HOOK_EVENTS}"
            )
        self._hooks[event].append(hook)
        return self

    def hooks(self, event: str) -> Tuple[Callable[[Any], None], ...]:
        return tuple(self._hooks.get(event, ()))

    def plugin(
        self,
        fn: Callable[["Schema", Any], None],
        options: Optional[Any] = None,
    ) -> "Schema":
        """Apply a plugin to this schema."""
        fn(self, options)
        return self

    def validator(self) -> Type[BaseModel]:
        """Pydantic model that validates documents of this schema."""
        if self._validator is None:
            field_definitions: Dict[str, Any] = {
                "id": (self.id_type, Field(..., alias="_id")),
            }
            for name, spec in self.fields.items():
                if spec.required:
                    field_definitions[name] = (spec.type, ...)
                else:
                    field_definitions[name] = (Optional[spec.type], None)

            self._validator = create_model(
                "SchemaDocument",
                __config__=ConfigDict(
                    arbitrary_types_allowed=True,
                    extra="allow",
                    populate_by_name=True,
                ),
                **field_definitions,
            )
        return self._validator
