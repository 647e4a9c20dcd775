"""
Configuration module for Mongo Soft Delete.

Options are resolved once, when the plugin is applied to a schema, and are
frozen afterwards. Parsing is permissive: values that cannot be understood
fall back to their defaults instead of raising.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .operations import OverridableMethod

logger = logging.getLogger(__name__)

_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off", "")


def _selects_all(value: Any) -> bool:
    return value is True or (isinstance(value, str) and value == "all")


class IndexFields(BaseModel):
    """Which deletion marker fields receive a secondary index."""

    model_config = ConfigDict(frozen=True)

    deleted: bool = Field(False, description="Index the deleted marker")
    deleted_at: bool = Field(False, description="Index the deletion timestamp")


class SoftDeleteOptions(BaseModel):
    """Options accepted by the soft delete plugin.

    Both the snake_case field names and the camelCase aliases are accepted:

        >>> SoftDeleteOptions.model_validate(
        ...     {"overrideMethods": "all", "indexFields": ["deleted_at"]}
        ... )

    Example:
        Loading from environment:

        >>> import os
        >>> os.environ["SOFT_DELETE_OVERRIDE_METHODS"] = "find,count"
        >>> options = SoftDeleteOptions.from_env()
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index_fields: IndexFields = Field(
        default_factory=IndexFields,
        alias="indexFields",
        description="Deletion fields to index",
    )
    override_methods: Tuple[OverridableMethod, ...] = Field(
        (),
        alias="overrideMethods",
        description="Base operations that receive filtered variants",
    )
    use_ne_operator: bool = Field(
        True,
        alias="use$neOperator",
        description="Use the operator form of the not-deleted predicate",
    )
    validate_before_delete: bool = Field(
        True,
        alias="validateBeforeDelete",
        description="Validate documents when saving an instance delete",
    )

    @field_validator("index_fields", mode="before")
    @classmethod
    def parse_index_fields(cls, v: Any) -> Any:
        """Accept "all", True, or a list of field names."""
        if isinstance(v, IndexFields):
            return v
        if isinstance(v, Mapping):
            flags = {}
            for name in ("deleted", "deleted_at"):
                flag = v.get(name, False)
                if not isinstance(flag, bool):
                    logger.debug("Ignoring non-boolean indexFields.%s %r", name, flag)
                    flag = False
                flags[name] = flag
            return IndexFields(**flags)
        if _selects_all(v):
            return IndexFields(deleted=True, deleted_at=True)
        if isinstance(v, (list, tuple, set, frozenset)):
            return IndexFields(deleted="deleted" in v, deleted_at="deleted_at" in v)
        if v is not None and v is not False:
            logger.debug("Ignoring unrecognized indexFields value %r", v)
        return IndexFields()

    @field_validator("override_methods", mode="before")
    @classmethod
    def parse_override_methods(cls, v: Any) -> Tuple[OverridableMethod, ...]:
        """Accept "all", True, or a list of method names; drop unknown names."""
        if _selects_all(v):
            return tuple(OverridableMethod)
        if not isinstance(v, (list, tuple, set, frozenset)):
            if v is not None and v is not False:
                logger.debug("Ignoring unrecognized overrideMethods value %r", v)
            return ()

        methods = []
        for name in v:
            method = OverridableMethod.lookup(name)
            if method is None:
                logger.debug("Ignoring unknown override method %r", name)
            elif method not in methods:
                methods.append(method)
        return tuple(methods)

    @field_validator("use_ne_operator", "validate_before_delete", mode="before")
    @classmethod
    def parse_flag(cls, v: Any, info: ValidationInfo) -> bool:
        """Only real booleans are honoured; anything else keeps the default."""
        if isinstance(v, bool):
            return v
        default = cls.model_fields[info.field_name].default
        logger.debug("Ignoring non-boolean %s value %r", info.field_name, v)
        return default

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to dictionary."""
        return self.model_dump()

    @classmethod
    def from_options(
        cls, options: Union["SoftDeleteOptions", Mapping[str, Any], None]
    ) -> "SoftDeleteOptions":
        """
        Resolve plugin options.

        Args:
            options: An options instance, a mapping of option values, or None
                to use the process-wide defaults

        Returns:
            Resolved options
        """
        if options is None:
            return get_options()
        if isinstance(options, SoftDeleteOptions):
            return options
        return cls.model_validate(dict(options))

    @classmethod
    def from_env(cls, prefix: str = "SOFT_DELETE_") -> "SoftDeleteOptions":
        """
        Load options from environment variables.

        ``SOFT_DELETE_INDEX_FIELDS`` and ``SOFT_DELETE_OVERRIDE_METHODS`` take
        "all", a boolean word, or a comma-separated list of names.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Options instance
        """
        values: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue
            raw = os.environ[env_var].strip()
            lowered = raw.lower()

            if field_info.annotation is bool:
                values[field_name] = lowered in _TRUE_WORDS
            elif lowered in _TRUE_WORDS:
                values[field_name] = True
            elif lowered in _FALSE_WORDS:
                values[field_name] = None
            elif lowered == "all":
                values[field_name] = "all"
            else:
                values[field_name] = [item.strip() for item in raw.split(",")]

        return cls.model_validate(values)


# Global options instance
_options: Optional[SoftDeleteOptions] = None


def get_options() -> SoftDeleteOptions:
    """
    Get the process-wide default options.

    Returns:
        Default options, loaded from the environment on first use
    """
    global _options

    if _options is None:
        _options = SoftDeleteOptions.from_env()

    return _options


def set_options(options: Optional[SoftDeleteOptions]) -> None:
    """
    Set the process-wide default options.

    Args:
        options: Options to use, or None to reload from the environment
    """
    global _options
    _options = options


def configure(**kwargs: Any) -> SoftDeleteOptions:
    """
    Update the process-wide default options with keyword arguments.

    Args:
        **kwargs: Option values, by field name or alias

    Returns:
        Updated options
    """
    global _options

    values = get_options().to_dict()
    values.update(kwargs)
    _options = SoftDeleteOptions.model_validate(values)

    return _options
