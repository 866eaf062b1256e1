"""Equality verdicts and the default structural equality function.

An equality function receives ``(old_value, new_value, parameters)`` and
returns either a plain ``bool`` or one of the tagged verdicts below when it
wants to attach metadata (e.g. the path of the first differing field).
"""

import inspect
import json
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Union


@dataclass(frozen=True)
class Equal:
    """The two results are considered equal."""

    metadata: Optional[dict] = None
    is_equal: ClassVar[bool] = True


@dataclass(frozen=True)
class Unequal:
    """The two results differ. ``metadata`` describes how, if known."""

    metadata: Optional[dict] = None
    is_equal: ClassVar[bool] = False


EqualityVerdict = Union[Equal, Unequal]


def _serialise(value: Any) -> str:
    try:
        return json.dumps(value, default=repr)
    except (TypeError, ValueError):
        # Circular references or keys json cannot encode.
        return repr(value)


def default_equality(old_value: Any, new_value: Any, parameters: Any = None) -> bool:
    """Compare two values by their JSON serialisation.

    Key order matters, as with any structural serialisation. Objects json
    cannot encode are serialised through ``repr``.
    """
    return _serialise(old_value) == _serialise(new_value)


def to_verdict(outcome: Any) -> EqualityVerdict:
    """Normalise an equality function's return value into a verdict.

    Accepts a verdict, a mapping with an ``is_equal`` key (and optional
    ``metadata``), or any other value judged by truthiness.

    Raises:
        TypeError: For awaitables, since equality functions must be
            synchronous, and for mappings without ``is_equal``.
    """
    if isinstance(outcome, (Equal, Unequal)):
        return outcome
    if inspect.isawaitable(outcome):
        if inspect.iscoroutine(outcome):
            outcome.close()
        raise TypeError("equality_fn must be synchronous, got an awaitable")
    if isinstance(outcome, Mapping):
        if "is_equal" not in outcome:
            raise TypeError("equality_fn returned a mapping without 'is_equal'")
        verdict = Equal if outcome["is_equal"] else Unequal
        return verdict(metadata=outcome.get("metadata"))
    return Equal() if outcome else Unequal()
