"""
Tagged results returned by the resource services.

Expected business outcomes are values, not exceptions: a service returns
``Ok(value)`` or one of the ``Failure`` members and the route maps it to a
response with ``unwrap``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Mapping, TypeVar, Union

from ..exceptions import ApiError

T = TypeVar("T")


class Failure(str, Enum):
    NOT_FOUND = "not_found"
    NO_PERMISSION = "no_permission"
    ALREADY_EXISTS = "already_exists"
    INVALID_PARENT = "invalid_parent"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


ServiceResult = Union[Ok[T], Failure]


def unwrap(result: "ServiceResult[T]", errors: Mapping[Failure, ApiError]) -> T:
    """Return the value of an Ok result or raise the mapped ApiError.

    A failure missing from ``errors`` is a programming error and is raised
    as a plain exception (rendered as a 500).
    """
    if isinstance(result, Ok):
        return result.value
    error = errors.get(result)
    if error is None:
        raise RuntimeError(f"Unhandled service failure: {result!r}")
    raise error
