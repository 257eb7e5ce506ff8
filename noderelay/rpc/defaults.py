"""Positional argument helpers for RPC wrappers.

Optional arguments are represented as `None` ("absent"). Before a call, the
argument list is trimmed and defaulted with `handle_defaults` so the server
receives the shortest positional list that keeps every set argument in place.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic_core import to_jsonable_python

from noderelay.rpc.serialization import validate_result
from noderelay.utils.exceptions import MissingDefaultError


def into_json(value: Any) -> Any:
    """Convert a domain value (pydantic model, enum, Decimal, ...) into a JSON value."""
    return to_jsonable_python(value, by_alias=True)


def opt_into_json(value: Any | None) -> Any:
    """Like `into_json`, but keeps `None` as the absent marker."""
    if value is None:
        return None
    return into_json(value)


def null() -> None:
    return None


def empty_arr() -> list[Any]:
    return []


def empty_obj() -> dict[str, Any]:
    return {}


def handle_defaults(args: Sequence[Any], defaults: Sequence[Any]) -> list[Any]:
    """
    Substitute absent arguments with values from `defaults`, except when they
    are trailing, in which case they are dropped from the returned list.

    `defaults` corresponds to the last elements of `args`:

        arg1 arg2 arg3 arg4
                  def1 def2

    Elements of `args` without a corresponding default are required and are
    never substituted. A `None` default means none is declared; needing one
    raises MissingDefaultError.
    """
    if len(defaults) > len(args):
        raise ValueError(f"{len(defaults)} defaults declared for {len(args)} arguments")

    out = list(args)
    last_set_idx: int | None = None
    for i in range(len(defaults)):
        args_i = len(out) - 1 - i
        defaults_i = len(defaults) - 1 - i
        if out[args_i] is None:
            if last_set_idx is not None:
                if defaults[defaults_i] is None:
                    raise MissingDefaultError(args_i)
                out[args_i] = defaults[defaults_i]
        elif last_set_idx is None:
            last_set_idx = args_i

    if last_set_idx is not None:
        return out[: last_set_idx + 1]
    return out[: len(out) - len(defaults)]


def opt_result(value: Any, result_type: Any = Any) -> Any:
    """Convert a possibly-null result into None or a validated value."""
    if value is None:
        return None
    return validate_result(value, result_type)
