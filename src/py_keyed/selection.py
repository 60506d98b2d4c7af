"""
Selection requests for PyTable / KeyedTable indexing.

Every Python indexing key is resolved by ``parse_selection`` into exactly one
of a closed set of request variants. Each variant has one result shape:

    SelectAll          copy of the whole table
    SelectColumn       raw column (PyVector)
    SelectColumns      table restricted to some columns
    SelectRows         table restricted to some rows (and columns)
    SelectRowsColumn   raw column restricted to some rows
    SelectCell         scalar

Row positions are normalised to non-negative ints, columns to names.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union
import warnings

from .vector import PyVector
from .errors import PyKeyedKeyError, PyKeyedIndexError, PyKeyedTypeError, PyKeyedValueError


@dataclass(frozen=True)
class SelectAll:
	"""Every row of every column (``t[:]`` / ``t[:, :]``)."""


@dataclass(frozen=True)
class SelectColumn:
	"""One whole column, returned raw."""
	column: str


@dataclass(frozen=True)
class SelectColumns:
	"""All rows of a list of columns."""
	columns: Tuple[str, ...]


@dataclass(frozen=True)
class SelectRows:
	"""Some rows (by range, mask or position list) of a list of columns."""
	rows: Tuple[int, ...]
	columns: Tuple[str, ...]


@dataclass(frozen=True)
class SelectRowsColumn:
	"""Some rows of one column, returned raw."""
	rows: Tuple[int, ...]
	column: str


@dataclass(frozen=True)
class SelectCell:
	"""A single value."""
	row: int
	column: str


Selection = Union[SelectAll, SelectColumn, SelectColumns, SelectRows, SelectRowsColumn, SelectCell]


class _All:
	"""Marker for an unrestricted axis."""
	__slots__ = ()

	def __repr__(self):
		return ":"


ALL = _All()


def _is_full_slice(spec) -> bool:
	return isinstance(spec, slice) and spec == slice(None)


def _is_int(x) -> bool:
	return isinstance(x, int) and not isinstance(x, bool)


def _check_slice(spec):
	bounds = (spec.start, spec.stop, spec.step)
	if not all(b is None or _is_int(b) for b in bounds):
		raise PyKeyedTypeError(f"Slice bounds must be integers or None, got {spec!r}")
	if spec.step == 0:
		raise PyKeyedValueError("Slice step cannot be zero")
	return spec


def _is_mask(spec) -> bool:
	if isinstance(spec, PyVector):
		schema = spec.schema()
		return schema is not None and schema.kind is bool and not schema.nullable
	return isinstance(spec, list) and len(spec) > 0 and all(isinstance(e, bool) for e in spec)


def _normalize_row(table, i) -> int:
	n = table.nrow
	if not -n <= i < n:
		raise PyKeyedIndexError(f"Row index {i} out of range for table with {n} rows")
	return i % n


def resolve_rows(table, spec):
	"""
	Normalise a row specification.

	Returns ALL, a single int, or a tuple of ints.
	"""
	if spec is Ellipsis or _is_full_slice(spec):
		return ALL

	if _is_int(spec):
		return _normalize_row(table, spec)

	if isinstance(spec, slice):
		return tuple(range(*_check_slice(spec).indices(table.nrow)))

	if _is_mask(spec):
		if len(spec) != table.nrow:
			raise PyKeyedValueError(
				f"Boolean mask has length {len(spec)}, but table has {table.nrow} rows"
			)
		return tuple(i for i, flag in enumerate(spec) if flag)

	if isinstance(spec, (list, tuple, range, PyVector)) and all(_is_int(e) for e in spec):
		# NOT RECOMMENDED
		if table.nrow > 1000:
			warnings.warn('Subscript indexing is sub-optimal for large tables; prefer slices or boolean masks')
		return tuple(_normalize_row(table, i) for i in spec)

	raise PyKeyedTypeError(
		f"Row indices must be ints, slices, boolean masks or integer lists, not {type(spec).__name__}"
	)


def _resolve_column(table, spec) -> str:
	if isinstance(spec, str):
		return table._resolve_column_name(spec)
	if isinstance(spec, PyVector) and spec._name is not None:
		return table._resolve_column_name(spec._name)
	if _is_int(spec):
		names = table.column_names
		if not -len(names) <= spec < len(names):
			raise PyKeyedIndexError(f"Column position {spec} out of range for table with {len(names)} columns")
		return names[spec]
	raise PyKeyedTypeError(f"Column indices must be names or positions, not {type(spec).__name__}")


def resolve_columns(table, spec):
	"""
	Normalise a column specification.

	Returns ALL, a single column name, or a tuple of names.
	"""
	if spec is Ellipsis or _is_full_slice(spec):
		return ALL
	if isinstance(spec, slice):
		return tuple(table.column_names[_check_slice(spec)])
	if isinstance(spec, (list, tuple)):
		return tuple(_resolve_column(table, s) for s in spec)
	return _resolve_column(table, spec)


def _combine(table, rows, cols) -> Selection:
	match rows, cols:
		case _All(), _All():
			return SelectAll()
		case _All(), str():
			return SelectColumn(cols)
		case _All(), tuple():
			return SelectColumns(cols)
		case int(), str():
			return SelectCell(rows, cols)
		case int(), _All():
			return SelectRows((rows,), tuple(table.column_names))
		case int(), tuple():
			return SelectRows((rows,), cols)
		case tuple(), str():
			return SelectRowsColumn(rows, cols)
		case tuple(), _All():
			return SelectRows(rows, tuple(table.column_names))
		case tuple(), tuple():
			return SelectRows(rows, cols)
	raise PyKeyedTypeError(f"Unsupported selection: rows={rows!r}, columns={cols!r}")


def parse_selection(table, key) -> Selection:
	"""
	Resolve a Python indexing key against ``table``.

	Single keys:
		'a'                 -> SelectColumn
		['a', 'b'] / 'a','b' -> SelectColumns
		0 / 1:3 / mask / [0, 2] -> SelectRows over all columns
		:                   -> SelectAll
	Pairs ``(rows, columns)`` combine both axes.
	"""
	if isinstance(key, tuple):
		if key and all(isinstance(k, str) for k in key):
			return SelectColumns(tuple(table._resolve_column_name(k) for k in key))
		if len(key) != 2:
			raise PyKeyedKeyError(f"Table indexing must provide a row and a column index, got {len(key)} indices")
		return _combine(table, resolve_rows(table, key[0]), resolve_columns(table, key[1]))

	if isinstance(key, str):
		return SelectColumn(table._resolve_column_name(key))

	if isinstance(key, list) and all(isinstance(k, str) for k in key):
		return SelectColumns(tuple(table._resolve_column_name(k) for k in key))

	return _combine(table, resolve_rows(table, key), ALL)
