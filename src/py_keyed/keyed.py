"""
KeyedTable: a PyTable with an ordered, de-duplicated set of key columns.

The key is the default criterion for:
  - sort()    column precedence when ``by`` is not given
  - unique()  row identity when ``subset`` is not given
  - join()    join columns when ``on`` is not given

Every operation that produces a new table computes the key of the result:
key columns that no longer exist in the result are dropped silently.
"""

import logging
from copy import deepcopy

from .table import PyTable
from .vector import PyVector
from .errors import KeyValidationError, PyKeyedTypeError
from .selection import SelectAll, SelectColumns, SelectRows, parse_selection

logger = logging.getLogger(__name__)


def _normalize_key(key):
	"""Name, PyVector or iterable of those -> list of names."""
	if isinstance(key, (str, PyVector)):
		key = [key]
	try:
		specs = list(key)
	except TypeError:
		raise PyKeyedTypeError(
			f"Key must be a column name or a sequence of column names, not {type(key).__name__}"
		) from None
	names = []
	for spec in specs:
		if isinstance(spec, PyVector):
			spec = spec._name
		if not isinstance(spec, str):
			raise PyKeyedTypeError(f"Key column names must be strings, not {type(spec).__name__}")
		names.append(spec)
	return names


def _intersect(names, available):
	"""Members of ``names`` also in ``available``, in the order of ``names``."""
	available = set(available)
	return [name for name in names if name in available]


def _union(a, b):
	return list(dict.fromkeys([*a, *b]))


class KeyedTable():
	"""
	Wrap ``table`` with ``key``, a column name or a sequence of column names
	(PyVectors stand for their names).

	The key is de-duplicated keeping first occurrences and must be a subset of
	the table's columns, otherwise KeyValidationError is raised.

	When joining, if only one argument is a KeyedTable and ``on`` is not given,
	the tables are joined on the key of the KeyedTable (restricted to the other
	table's columns). If both are KeyedTables, ``on`` defaults to the
	intersection of their keys. The result is keyed only when the left argument is.

	unique() without ``subset`` deduplicates on the key instead of all columns;
	call ``kt.unique(kt.column_names)`` to drop only rows duplicated across all
	columns.

	Equality (==) ignores key order, so two equal KeyedTables may still sort
	differently. identical() and hash() respect key order.
	"""

	def __init__(self, table, key):
		if not isinstance(table, PyTable):
			raise PyKeyedTypeError(f"KeyedTable wraps a PyTable, not {type(table).__name__}")

		key = tuple(dict.fromkeys(_normalize_key(key)))
		columns = set(table.column_names)
		missing = [name for name in key if name not in columns]
		if missing:
			raise KeyValidationError(
				f"Key columns must be a subset of table columns; missing {missing}"
			)

		self._table = table
		self._key = key

	@classmethod
	def _derive(cls, table, key):
		"""Wrap a derived table whose key is already known to be valid."""
		kt = cls.__new__(cls)
		kt._table = table
		kt._key = tuple(key)
		return kt

	def _rewrap(self, table, candidates, operation):
		"""Wrap ``table`` with the candidate key columns it still has."""
		key = _intersect(candidates, table.column_names)
		if len(key) != len(candidates):
			logger.debug(
				"%s dropped key column(s) %s missing from the result",
				operation, [name for name in candidates if name not in key],
			)
		return type(self)._derive(table, key)

	#-----------------------------------------------------
	# Accessors
	#-----------------------------------------------------

	@property
	def key(self):
		"""Ordered key column names."""
		return self._key

	@property
	def table(self):
		"""The wrapped PyTable."""
		return self._table

	@property
	def column_names(self):
		return self._table.column_names

	@property
	def nrow(self):
		return self._table.nrow

	@property
	def ncol(self):
		return self._table.ncol

	def __len__(self):
		return len(self._table)

	def size(self):
		return self._table.size()

	def cols(self):
		return self._table.cols()

	def to_dict(self):
		return self._table.to_dict()

	def __iter__(self):
		return iter(self._table)

	def __getattr__(self, attr):
		"""Column access by sanitized attribute name; nothing else is forwarded."""
		if attr.startswith("_"):
			raise AttributeError(attr)
		col_idx = self._table._column_map.get(attr.lower())
		if col_idx is not None:
			return self._table._underlying[col_idx]
		raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")

	def __dir__(self):
		return sorted(set(object.__dir__(self)) | set(self._table._column_map))

	def __repr__(self):
		from .display import _printr
		return _printr(self._table, key=self._key)

	#-----------------------------------------------------
	# Copying
	#-----------------------------------------------------

	def copy(self):
		return type(self)._derive(self._table.copy(), self._key)

	def __copy__(self):
		return self.copy()

	def __deepcopy__(self, memo):
		return type(self)._derive(deepcopy(self._table, memo), self._key)

	#-----------------------------------------------------
	# Equality / hashing
	#-----------------------------------------------------

	def __eq__(self, other):
		"""Same data and the same key columns, in any order."""
		if isinstance(other, KeyedTable):
			return self._table == other._table and set(self._key) == set(other._key)
		if isinstance(other, PyTable):
			return self._table == other
		return NotImplemented

	def identical(self, other):
		"""Same data and the same key columns in the same order. Never true for a plain PyTable."""
		if not isinstance(other, KeyedTable):
			return False
		return self._table == other._table and self._key == other._key

	def __hash__(self):
		return hash((hash(self._table), self._key))

	#-----------------------------------------------------
	# Indexing
	#-----------------------------------------------------

	def __getitem__(self, index):
		selection = parse_selection(self._table, index)
		match selection:
			case SelectAll():
				return self.copy()
			case SelectColumns() | SelectRows():
				result = self._table._select(selection)
				# Result columns decide the order of the surviving key columns
				key = _intersect(result.column_names, self._key)
				if len(key) != len(self._key):
					logger.debug(
						"selection dropped key column(s) %s",
						[name for name in self._key if name not in key],
					)
				return type(self)._derive(result, key)
			case _:
				return self._table._select(selection)

	def __setitem__(self, index, value):
		self._table[index] = value

	#-----------------------------------------------------
	# Sorting / uniqueness
	#-----------------------------------------------------

	def sort(self, by=None, reverse=False, na_last=True):
		"""Sorted copy; ``by`` defaults to the key (first key column is most significant)."""
		table = self._table.sort(self._key if by is None else by, reverse=reverse, na_last=na_last)
		return type(self)._derive(table, self._key)

	def sort_inplace(self, by=None, reverse=False, na_last=True):
		self._table.sort_inplace(self._key if by is None else by, reverse=reverse, na_last=na_last)
		return self

	def unique(self, subset=None):
		"""Copy without rows whose ``subset`` values (default: the key) repeat an earlier row."""
		table = self._table.unique(self._key if subset is None else subset)
		return type(self)._derive(table, self._key)

	def unique_inplace(self, subset=None):
		self._table.unique_inplace(self._key if subset is None else subset)
		return self

	#-----------------------------------------------------
	# Joins
	#-----------------------------------------------------

	def join(self, other, on=None, kind='inner', **kwargs):
		"""Join with a KeyedTable or PyTable; see :func:`join`."""
		return join(self, other, on=on, kind=kind, **kwargs)

	#-----------------------------------------------------
	# Row / column mutation (key never changes)
	#-----------------------------------------------------

	def push(self, row):
		self._table.push(row)
		return self

	def insert(self, index, row):
		self._table.insert(index, row)
		return self

	def append(self, other):
		self._table.append(other)
		return self

	def delete_rows(self, rows):
		self._table.delete_rows(rows)
		return self

	def head(self, n=5):
		return type(self)._derive(self._table.head(n), self._key)

	def tail(self, n=5):
		return type(self)._derive(self._table.tail(n), self._key)

	def permute(self, order):
		self._table.permute(order)
		return self


def join(left, right, on=None, kind='inner', **kwargs):
	"""
	Join ``left`` and ``right``; the result is keyed only if ``left`` is.

	KeyedTable ⋈ KeyedTable:
		``on`` defaults to the keys' intersection. The result key is
		(left key ∪ right key) ∩ result columns, or left key ∩ result columns
		for semi and anti joins.
	KeyedTable ⋈ PyTable:
		``on`` defaults to left key ∩ right columns; result key is
		left key ∩ result columns.
	PyTable ⋈ KeyedTable:
		``on`` defaults to right key ∩ left columns; result is a plain PyTable.

	Remaining keyword arguments (``expect``) go to PyTable.join, whose errors
	propagate unchanged. An empty default ``on`` is passed through as is.
	"""
	default_on = on is None and kind != 'cross'

	match left, right:
		case KeyedTable(), KeyedTable():
			if default_on:
				on = _intersect(left.key, right.key)
			table = left.table.join(right.table, on=on, kind=kind, **kwargs)
			if kind in ('semi', 'anti'):
				candidates = list(left.key)
			else:
				candidates = _union(left.key, right.key)
		case KeyedTable(), PyTable():
			if default_on:
				on = _intersect(left.key, right.column_names)
			table = left.table.join(right, on=on, kind=kind, **kwargs)
			candidates = list(left.key)
		case PyTable(), _:
			return left.join(right, on=on, kind=kind, **kwargs)
		case _:
			raise PyKeyedTypeError(
				f"Cannot join {type(left).__name__} with {type(right).__name__}"
			)

	return left._rewrap(table, candidates, f"{kind} join")
