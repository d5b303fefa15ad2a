"""Typed success / failure values returned by the service layer.

Expected outcomes (validation failures, missing rows, bad credentials) are
returned as ``Err`` values instead of raised, so callers handle both arms
explicitly::

    result = ledger.get(user.id, expense_id)
    if isinstance(result, Err):
        ...
    expense = result.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]

__all__ = ["Ok", "Err", "Result"]
