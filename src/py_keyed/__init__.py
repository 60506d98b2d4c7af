"""
py-keyed: key-aware tables for Python

A PyTable carries named columns of equal length. A KeyedTable wraps a PyTable
with an ordered set of key columns that become the default for sorting,
deduplication and joins, and keeps that key correct as the table is selected,
joined, sorted, deduplicated, appended to and permuted.

Main classes:
    - PyVector: named, immutable column
    - PyTable: 2D table (multiple columns of equal length)
    - KeyedTable: PyTable plus key columns

Zero external dependencies - pure Python stdlib only.
"""

from .vector import PyVector
from .table import PyTable
from .keyed import KeyedTable, join
from .typing import DataType
from .selection import (
	Selection,
	SelectAll,
	SelectCell,
	SelectColumn,
	SelectColumns,
	SelectRows,
	SelectRowsColumn,
	parse_selection,
)
from .errors import (
	PyKeyedError,
	PyKeyedKeyError,
	PyKeyedValueError,
	PyKeyedTypeError,
	PyKeyedIndexError,
	KeyValidationError,
)

__version__ = "0.1.0"
__all__ = [
	"PyVector",
	"PyTable",
	"KeyedTable",
	"join",
	"DataType",
	"Selection",
	"SelectAll",
	"SelectCell",
	"SelectColumn",
	"SelectColumns",
	"SelectRows",
	"SelectRowsColumn",
	"parse_selection",
	"PyKeyedError",
	"PyKeyedKeyError",
	"PyKeyedValueError",
	"PyKeyedTypeError",
	"PyKeyedIndexError",
	"KeyValidationError",
]
