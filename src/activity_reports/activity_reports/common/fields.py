from __future__ import annotations

from enum import Enum
from typing import TypeVar, Union

T = TypeVar("T")


class _Unset(Enum):
    """Marker for a patch field the caller did not supply."""

    UNSET = "UNSET"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET

Maybe = Union[T, _Unset]


def is_set(value) -> bool:
    return value is not UNSET
