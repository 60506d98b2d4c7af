"""
Column dtypes.

A DataType records which Python type a column holds and whether it has gaps.
Tables use it to recognise boolean masks, to check that join columns can be
compared, and to label columns in the display footer.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Type
import warnings


# Kinds a column keeps as is; anything else is stored as object
_KNOWN_KINDS = (bool, int, float, str, datetime, date)

# Widening order inside a family
_NUMERIC_LADDER = (bool, int, float)
_TEMPORAL_LADDER = (date, datetime)


@dataclass(frozen=True)
class DataType:
    """
    Kind and nullability of a column.

    >>> DataType(int, nullable=True)
    <int?>
    """

    kind: Type[Any]
    nullable: bool = False

    def __repr__(self):
        return f"<{self.kind.__name__}{'?' if self.nullable else ''}>"

    @property
    def is_numeric(self) -> bool:
        return self.kind in _NUMERIC_LADDER

    @property
    def is_temporal(self) -> bool:
        return self.kind in _TEMPORAL_LADDER

    def widen(self, kind: Type[Any]) -> "DataType":
        """Smallest DataType holding both this kind and ``kind``."""
        if kind is self.kind:
            return self
        for ladder in (_NUMERIC_LADDER, _TEMPORAL_LADDER):
            if self.kind in ladder and kind in ladder:
                return DataType(max(self.kind, kind, key=ladder.index), self.nullable)
        if self.kind is not object:
            warnings.warn(
                f"Column of {self.kind.__name__} receives a {kind.__name__}; storing it as object",
                stacklevel=4,
            )
        return DataType(object, self.nullable)


def infer_kind(value: Any) -> Optional[Type]:
    """Kind of a single value; None for a missing value."""
    if value is None:
        return None
    # datetime before date, bool before int: both are subclasses
    for kind in _KNOWN_KINDS:
        if isinstance(value, kind):
            return kind
    return object


def infer_dtype(values: Iterable[Any]) -> Optional[DataType]:
    """
    DataType of a column of values, or None when there are no values.

    Missing values only make the column nullable; a column of nothing but
    missing values is a nullable object column.
    """
    dtype = None
    nullable = False
    for v in values:
        kind = infer_kind(v)
        if kind is None:
            nullable = True
        elif dtype is None:
            dtype = DataType(kind)
        else:
            dtype = dtype.widen(kind)

    if dtype is None:
        return DataType(object, nullable=True) if nullable else None
    if nullable and not dtype.nullable:
        return DataType(dtype.kind, nullable=True)
    return dtype
