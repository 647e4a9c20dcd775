"""
Argument normalization for update-style and read-style calls.

Update operations accept any leading subset of ``(conditions, update,
options, callback)``, and a callback may appear in any of those slots.
``parse_update_arguments`` resolves such a call into an ``UpdateArguments``
value whose fields are named, so callers never have to guess positions.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

Callback = Callable[..., Any]

_UPDATE_SLOTS = ("conditions", "update", "options", "callback")


class CallShape(str, Enum):
    """Which of the update call forms a resolved call has."""

    EMPTY = "empty"
    CALLBACK_ONLY = "callback_only"
    PAYLOAD_ONLY = "payload_only"
    BY_FILTER = "by_filter"
    WITH_OPTIONS = "with_options"


@dataclass(frozen=True)
class UpdateArguments:
    """Resolved arguments of an update-style call.

    ``conditions`` of None means "match all"; ``update`` of None means
    "no-op payload".
    """

    conditions: Optional[Mapping[str, Any]] = None
    update: Optional[Mapping[str, Any]] = None
    options: Optional[Mapping[str, Any]] = None
    callback: Optional[Callback] = None

    @property
    def shape(self) -> CallShape:
        if self.options is not None:
            return CallShape.WITH_OPTIONS
        if self.conditions is not None:
            return CallShape.BY_FILTER
        if self.update is not None:
            return CallShape.PAYLOAD_ONLY
        if self.callback is not None:
            return CallShape.CALLBACK_ONLY
        return CallShape.EMPTY

    def as_list(self) -> List[Any]:
        """Dense ordered list of the supplied arguments."""
        return [
            value
            for value in (self.conditions, self.update, self.options, self.callback)
            if value is not None
        ]

    def as_kwargs(self) -> Dict[str, Any]:
        return {slot: getattr(self, slot) for slot in _UPDATE_SLOTS}

    def with_conditions(self, conditions: Mapping[str, Any]) -> "UpdateArguments":
        return dataclasses.replace(self, conditions=conditions)

    @classmethod
    def resolve(cls, *args: Any, **kwargs: Any) -> "UpdateArguments":
        """
        Resolve positional arguments, then apply keyword arguments on top.

        Raises:
            TypeError: On an unknown keyword or too many positional arguments
        """
        unknown = set(kwargs) - set(_UPDATE_SLOTS)
        if unknown:
            raise TypeError(
                f"Unexpected keyword argument(s): {', '.join(sorted(unknown))}"
            )

        resolved = parse_update_arguments(*args)
        overrides = {key: value for key, value in kwargs.items() if value is not None}
        if overrides:
            resolved = dataclasses.replace(resolved, **overrides)
        return resolved


def parse_update_arguments(*args: Any) -> UpdateArguments:
    """
    Work out which positional argument of an update call is which.

    Rules, in priority order:

    1. A callable in the options slot is the callback.
    2. A callable in the update slot is the callback; the first argument is
       then the update payload and the conditions are empty.
    3. A callable in the conditions slot is the callback and nothing else
       was given.
    4. A single mapping argument is the update payload.
    5. Otherwise arguments are taken positionally.

    Args:
        *args: Up to four of conditions, update, options, callback

    Returns:
        Resolved arguments

    Raises:
        TypeError: If more than four arguments are given
    """
    if len(args) > len(_UPDATE_SLOTS):
        raise TypeError(
            f"Expected at most {len(_UPDATE_SLOTS)} arguments, got {len(args)}"
        )

    conditions, update, options, callback = (list(args) + [None] * 4)[:4]

    if callable(options):
        callback = options
        options = None
    elif callable(update):
        callback = update
        update = conditions
        conditions = {}
        options = None
    elif callable(conditions):
        callback = conditions
        conditions = None
        update = None
        options = None
    elif (
        isinstance(conditions, Mapping)
        and update is None
        and options is None
        and callback is None
    ):
        update = conditions
        conditions = None

    return UpdateArguments(
        conditions=conditions, update=update, options=options, callback=callback
    )


def split_callback(args: Tuple[Any, ...]) -> Tuple[Tuple[Any, ...], Optional[Callback]]:
    """Separate a trailing callback from the arguments of a read-style call."""
    args = tuple(args)
    while args and args[-1] is None:
        args = args[:-1]
    if args and callable(args[-1]):
        return args[:-1], args[-1]
    return args, None


def read_arguments(
    args: Tuple[Any, ...], size: int
) -> Tuple[List[Any], Optional[Callback]]:
    """
    Pad the arguments of a read-style call to ``size`` slots.

    Raises:
        TypeError: If more than ``size`` non-callback arguments are given
    """
    values, callback = split_callback(args)
    if len(values) > size:
        raise TypeError(f"Expected at most {size} arguments, got {len(values)}")
    return list(values) + [None] * (size - len(values)), callback
