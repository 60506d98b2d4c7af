from copy import deepcopy

from .vector import PyVector
from .naming import _sanitize_user_name, _uniquify, _system_name
from .errors import PyKeyedKeyError, PyKeyedValueError, PyKeyedTypeError, PyKeyedIndexError
from .selection import (
	ALL,
	SelectAll,
	SelectCell,
	SelectColumn,
	SelectColumns,
	SelectRows,
	SelectRowsColumn,
	parse_selection,
	resolve_columns,
	resolve_rows,
)


JOIN_KINDS = ('inner', 'left', 'right', 'outer', 'semi', 'anti', 'cross')
JOIN_EXPECTATIONS = ('one_to_one', 'many_to_one', 'one_to_many', 'many_to_many')


def _missing_col_error(name, context="PyTable"):
	return PyKeyedKeyError(f"Column '{name}' not found in {context}")


def _sort_key(na_last, reverse):
	"""Sort key for one column; None stays last (or first) regardless of direction."""
	none_high = na_last != reverse
	return lambda x: ((x is None) == none_high, x if x is not None else 0)


def _unwrap(other):
	"""Underlying PyTable of a KeyedTable; anything else is returned as is."""
	from .keyed import KeyedTable
	if isinstance(other, KeyedTable):
		return other.table
	return other


class _RowView:
	"""Lightweight row view for iterating over table rows with attribute access."""
	__slots__ = ('_cols', '_names', '_column_map', '_index')

	def __init__(self, table, index):
		# Cache direct handles to underlying data (bypasses PyVector method dispatch)
		self._cols = [col._underlying for col in table._underlying]
		self._names = {col._name: i for i, col in enumerate(table._underlying)}
		self._column_map = table._column_map
		self._index = index

	def set_index(self, index):
		"""Reuse this row view for a different index (avoids allocation during iteration)."""
		self._index = index
		return self

	def __getattr__(self, attr):
		"""Access column values by sanitized attribute name."""
		col_idx = self._column_map.get(attr.lower())
		if col_idx is None:
			raise AttributeError(f"Row has no attribute '{attr}'")
		return self._cols[col_idx][self._index]

	def __getitem__(self, key):
		"""Access column values by position or name."""
		if isinstance(key, str):
			col_idx = self._names.get(key)
			if col_idx is None:
				col_idx = self._column_map.get(key.lower())
			if col_idx is None:
				raise _missing_col_error(key, context="row")
			return self._cols[col_idx][self._index]
		try:
			return self._cols[key][self._index]
		except TypeError:
			raise TypeError(f"Row indices must be int or str, not {type(key).__name__}")

	def __iter__(self):
		idx = self._index
		for col in self._cols:
			yield col[idx]

	def __len__(self):
		return len(self._cols)

	def as_tuple(self):
		return tuple(self)

	def __repr__(self):
		idx = self._index
		values = [repr(col[idx]) for col in self._cols]
		return f"Row({idx}: {', '.join(values)})"


class PyTable():
	""" Multiple named columns of the same length """
	_length = 0
	_underlying = ()
	_column_map = None

	def __init__(self, initial=()):
		if isinstance(initial, PyTable):
			initial = initial._underlying

		# Handle dict initialization {name: values, ...}
		if isinstance(initial, dict):
			initial = [PyVector(values, name=col_name) for col_name, values in initial.items()]

		columns = []
		for idx, col in enumerate(initial):
			if not isinstance(col, PyVector):
				raise PyKeyedTypeError(
					f"PyTable columns must be PyVectors, got {type(col).__name__} at position {idx}"
				)
			# Tables receive snapshots of vectors, preventing renames from leaking
			columns.append(col.copy(name=col._name if col._name is not None else _system_name(idx)))

		lengths = {len(col) for col in columns}
		if len(lengths) > 1:
			raise PyKeyedValueError(
				f"All columns must have the same length, got lengths {sorted(lengths)}"
			)

		names = [col._name for col in columns]
		duplicates = sorted({n for n in names if names.count(n) > 1})
		if duplicates:
			raise PyKeyedValueError(f"Duplicate column names: {duplicates}")

		self._underlying = columns
		self._length = lengths.pop() if lengths else 0
		self._column_map = self._build_column_map()

	def _build_column_map(self):
		"""Build mapping from sanitized column names to column indices.

		Used for attribute access on tables and rows.
		"""
		column_map = {}
		seen = set()
		for idx, col in enumerate(self._underlying):
			base = _sanitize_user_name(col._name)
			if base is None:
				sanitized = _system_name(idx)
			else:
				sanitized = _uniquify(base, seen)
				seen.add(sanitized)
			column_map[sanitized] = idx
		return column_map

	#-----------------------------------------------------
	# Shape / introspection
	#-----------------------------------------------------

	@property
	def column_names(self):
		"""Ordered list of current column names."""
		return [col._name for col in self._underlying]

	@property
	def nrow(self):
		return self._length

	@property
	def ncol(self):
		return len(self._underlying)

	def __len__(self):
		return self._length

	def size(self):
		return (self.nrow, self.ncol)

	def cols(self):
		return list(self._underlying)

	def to_dict(self):
		return {col._name: list(col) for col in self._underlying}

	def __dir__(self):
		"""Return list of available attributes including sanitized column names."""
		base_attrs = object.__dir__(self)
		return sorted(set(base_attrs + list(self._column_map.keys())))

	def __getattr__(self, attr):
		"""Access columns by sanitized attribute name using pre-computed column map."""
		if attr.startswith('_'):
			raise AttributeError(attr)
		col_idx = self._column_map.get(attr.lower())
		if col_idx is not None:
			return self._underlying[col_idx]
		raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")

	def _resolve_column_name(self, name, context="PyTable"):
		"""Exact name first, then the sanitized attribute spelling."""
		for col in self._underlying:
			if col._name == name:
				return name
		col_idx = self._column_map.get(str(name).lower())
		if col_idx is not None:
			return self._underlying[col_idx]._name
		raise _missing_col_error(name, context)

	def _column(self, name):
		for col in self._underlying:
			if col._name == name:
				return col
		raise _missing_col_error(name)

	def _column_list(self, spec, context="PyTable"):
		"""Normalize None / name / PyVector / iterable of those into a list of names."""
		if spec is None:
			return self.column_names
		if isinstance(spec, (str, PyVector)):
			spec = [spec]
		names = []
		for s in spec:
			if isinstance(s, PyVector):
				s = s._name
			names.append(self._resolve_column_name(s, context))
		return names

	#-----------------------------------------------------
	# Indexing
	#-----------------------------------------------------

	def __getitem__(self, key):
		return self._select(parse_selection(self, key))

	def _select(self, selection):
		match selection:
			case SelectAll():
				return self.copy()
			case SelectColumn(column=name):
				return self._column(name)
			case SelectColumns(columns=names):
				return PyTable([self._column(name) for name in names])
			case SelectRows(rows=rows, columns=names):
				rows = list(rows)
				return PyTable([self._column(name)[rows] for name in names])
			case SelectRowsColumn(rows=rows, column=name):
				return self._column(name)[list(rows)]
			case SelectCell(row=row, column=name):
				return self._column(name)[row]
		raise PyKeyedTypeError(f"Unsupported selection {selection!r}")

	def __setitem__(self, key, value):
		"""
		t['name'] = values   add or replace a whole column (scalars broadcast)
		t[row, 'name'] = v   replace a single cell
		"""
		if isinstance(key, str):
			if isinstance(value, PyVector) or (hasattr(value, '__iter__') and not isinstance(value, (str, bytes))):
				values = tuple(value)
				if self._underlying and len(values) != self._length:
					raise PyKeyedValueError(
						f"Column '{key}' has length {len(values)}, but table has {self._length} rows"
					)
			else:
				values = (value,) * self._length
			new_col = PyVector(values, name=key)
			for i, col in enumerate(self._underlying):
				if col._name == key:
					self._underlying[i] = new_col
					break
			else:
				self._underlying.append(new_col)
				self._length = len(values)
			self._column_map = self._build_column_map()
			return

		if isinstance(key, tuple) and len(key) == 2:
			row = resolve_rows(self, key[0])
			if not isinstance(row, int):
				raise PyKeyedTypeError("Cell assignment needs a single row index")
			name = resolve_columns(self, key[1])
			if not isinstance(name, str):
				raise PyKeyedTypeError("Cell assignment needs a single column index")
			self._replace_values(name, {row: value})
			return

		raise PyKeyedTypeError(f"Unsupported assignment key {key!r}")

	def _replace_values(self, name, updates):
		for i, col in enumerate(self._underlying):
			if col._name == name:
				values = list(col._underlying)
				for row, value in updates.items():
					values[row] = value
				self._underlying[i] = PyVector(values, name=name)
				return
		raise _missing_col_error(name)

	def __iter__(self):
		"""Iterate over rows using a reusable _RowView for memory efficiency."""
		row_view = _RowView(self, 0)
		for i in range(len(self)):
			row_view.set_index(i)
			yield row_view

	def __repr__(self):
		from .display import _printr
		return _printr(self)

	#-----------------------------------------------------
	# Equality / hashing / copying
	#-----------------------------------------------------

	def __eq__(self, other):
		if not isinstance(other, PyTable):
			return NotImplemented
		if self.column_names != other.column_names or self._length != other._length:
			return False
		return all(a.equals(b) for a, b in zip(self._underlying, other._underlying))

	def __hash__(self):
		return hash((tuple(self.column_names), tuple(col.fingerprint() for col in self._underlying)))

	def copy(self):
		return PyTable(self._underlying)

	def __copy__(self):
		return self.copy()

	def __deepcopy__(self, memo):
		return PyTable([
			PyVector(deepcopy(list(col._underlying), memo), dtype=col._dtype, name=col._name)
			for col in self._underlying
		])

	def _take_inplace(self, indices):
		indices = list(indices)
		self._underlying = [col[indices] for col in self._underlying]
		self._length = len(indices)
		return self

	#-----------------------------------------------------
	# Sorting / uniqueness
	#-----------------------------------------------------

	def _sort_order(self, by, reverse, na_last):
		names = self._column_list(by)
		if isinstance(reverse, (list, tuple)):
			if len(reverse) != len(names):
				raise PyKeyedValueError(
					f"reverse has {len(reverse)} flags for {len(names)} sort columns"
				)
			flags = list(reverse)
		else:
			flags = [bool(reverse)] * len(names)

		order = list(range(self._length))
		# Stable sorts from the least to the most significant column
		for name, rev in reversed(list(zip(names, flags))):
			values = self._column(name)._underlying
			key_fn = _sort_key(na_last, rev)
			try:
				order.sort(key=lambda i: key_fn(values[i]), reverse=rev)
			except TypeError as e:
				raise PyKeyedTypeError(f"Column '{name}' contains values that cannot be ordered") from e
		return order

	def sort(self, by=None, reverse=False, na_last=True):
		"""
		Stable lexicographic sort over ``by`` (default: all columns, left to right).

		Returns a new PyTable. ``reverse`` is a bool or one bool per sort column.
		"""
		return self.copy()._take_inplace(self._sort_order(by, reverse, na_last))

	def sort_inplace(self, by=None, reverse=False, na_last=True):
		"""In-place version of sort(); returns self for chaining."""
		return self._take_inplace(self._sort_order(by, reverse, na_last))

	def _unique_rows(self, subset):
		names = self._column_list(subset)
		if not names:
			raise PyKeyedValueError("Finding duplicate rows requires at least one column")
		key_cols = [self._column(name)._underlying for name in names]
		keys = [tuple(col[i] for col in key_cols) for i in range(self._length)]

		# Fast path: hashable
		try:
			seen = set()
			keep = []
			for i, key in enumerate(keys):
				if key not in seen:
					seen.add(key)
					keep.append(i)
			return keep
		except TypeError:
			pass   # fall through → slow path

		kept_keys = []
		keep = []
		for i, key in enumerate(keys):
			if not any(key == k for k in kept_keys):
				kept_keys.append(key)
				keep.append(i)
		return keep

	def unique(self, subset=None):
		"""
		Keep the first row of each distinct combination of ``subset`` values
		(default: all columns). Returns a new PyTable.
		"""
		return self.copy()._take_inplace(self._unique_rows(subset))

	def unique_inplace(self, subset=None):
		"""In-place version of unique(); returns self for chaining."""
		return self._take_inplace(self._unique_rows(subset))

	#-----------------------------------------------------
	# Joins
	#-----------------------------------------------------

	@staticmethod
	def _validate_key_tuple_hashable(key_tuple, key_names, row_idx):
		"""
		Validate that a join key tuple is hashable (for object dtype columns).

		Raises:
			PyKeyedTypeError: If any key component is not hashable
		"""
		try:
			hash(key_tuple)
		except TypeError as e:
			for component, col_name in zip(key_tuple, key_names):
				try:
					hash(component)
				except TypeError:
					raise PyKeyedTypeError(
						f"Join key value in '{col_name}' at row {row_idx} is not hashable: "
						f"{type(component).__name__}. Join keys must be hashable."
					) from e
			raise PyKeyedTypeError(
				f"Join key at row {row_idx} is not hashable."
			) from e

	def _validate_join_keys(self, other, on, kind):
		"""
		Validate and normalize a join column specification.

		Args:
			other: Right table to join with
			on: Column name, list of names, or list of (left, right) name pairs
			kind: Join kind

		Returns:
			List of (left_name, right_name) tuples
		"""
		if on is None:
			on = []
		elif isinstance(on, (str, PyVector)):
			on = [on]

		if kind == 'cross':
			if on:
				raise PyKeyedValueError("Cross joins do not take join columns")
			return []

		if not on:
			raise PyKeyedValueError("Must specify at least 1 join key")

		pairs = []
		for i, spec in enumerate(on):
			if isinstance(spec, tuple) and len(spec) == 2:
				left_spec, right_spec = spec
			else:
				left_spec = right_spec = spec
			if isinstance(left_spec, PyVector):
				left_spec = left_spec._name
			if isinstance(right_spec, PyVector):
				right_spec = right_spec._name
			left_name = self._resolve_column_name(left_spec, context="left table")
			right_name = other._resolve_column_name(right_spec, context="right table")

			left_schema = self._column(left_name).schema()
			right_schema = other._column(right_name).schema()
			if left_schema is not None and right_schema is not None:
				kinds = {left_schema.kind, right_schema.kind}
				comparable = (
					len(kinds) == 1
					or object in kinds
					or (left_schema.is_numeric and right_schema.is_numeric)
					or (left_schema.is_temporal and right_schema.is_temporal)
				)
				if not comparable:
					raise PyKeyedTypeError(
						f"Join key at index {i} has mismatched dtypes: "
						f"{left_schema.kind.__name__} (left) vs {right_schema.kind.__name__} (right)"
					)
			pairs.append((left_name, right_name))

		return pairs

	def join(self, other, on=None, kind='inner', expect='many_to_many'):
		"""
		Join two PyTables on key columns.

		Args:
			other: PyTable (or KeyedTable) to join with
			on: Column name(s), or (left, right) name pairs when names differ
			kind: 'inner', 'left', 'right', 'outer', 'semi', 'anti' or 'cross'
			expect: Cardinality expectation - 'one_to_one', 'many_to_one',
			        'one_to_many' or 'many_to_many'

		Returns:
			PyTable with the left columns followed by the right columns minus the
			right join columns. Colliding right names get a '__2' style suffix.
			Semi and anti joins return left columns only.

		A keyed right operand contributes its key as the default ``on`` but the
		result is never keyed; keyed results come from KeyedTable.join.
		"""
		from .keyed import KeyedTable

		if isinstance(other, KeyedTable):
			if on is None and kind != 'cross':
				on = [k for k in other.key if k in self.column_names]
			other = other.table

		if not isinstance(other, PyTable):
			raise PyKeyedTypeError(f"Cannot join PyTable with {type(other).__name__}")
		if kind not in JOIN_KINDS:
			raise PyKeyedValueError(f"Invalid join kind '{kind}'. Must be one of {', '.join(JOIN_KINDS)}.")
		if expect not in JOIN_EXPECTATIONS:
			raise PyKeyedValueError(
				f"Invalid expect='{expect}'. "
				"Must be one of 'one_to_one', 'many_to_one', 'one_to_many', 'many_to_many'."
			)

		pairs = self._validate_join_keys(other, on, kind)
		left_names = [l for l, _ in pairs]
		right_names = [r for _, r in pairs]
		left_keys = [self._column(name)._underlying for name in left_names]
		right_keys = [other._column(name)._underlying for name in right_names]

		# Only object columns can hold unhashable values
		validate_hashable = any(
			(col.schema() is None or col.schema().kind is object)
			for col in [self._column(n) for n in left_names] + [other._column(n) for n in right_names]
		)

		# ------------------------------------------------------------------
		# 1. Build hash index for right table
		# ------------------------------------------------------------------
		right_index = {}
		check_right_unique = expect in ('one_to_one', 'many_to_one')
		duplicates = {}

		for right_idx in range(other._length):
			key = tuple(col[right_idx] for col in right_keys)
			if validate_hashable:
				PyTable._validate_key_tuple_hashable(key, right_names, right_idx)
			bucket = right_index.get(key)
			if bucket is None:
				right_index[key] = [right_idx]
			else:
				bucket.append(right_idx)
				if check_right_unique:
					duplicates[key] = bucket

		if duplicates:
			example_key, example_inds = next(iter(duplicates.items()))
			raise PyKeyedValueError(
				f"Join expectation '{expect}' violated: Right side has duplicate keys.\n"
				f"Example: {example_key} appears {len(example_inds)} times."
			)

		# ------------------------------------------------------------------
		# 2. Walk the left table, pairing row indices
		# ------------------------------------------------------------------
		check_left_unique = expect in ('one_to_one', 'one_to_many')
		left_keys_seen = set()
		emitted = []
		matched_right = set()

		for left_idx in range(self._length):
			key = tuple(col[left_idx] for col in left_keys)
			if validate_hashable:
				PyTable._validate_key_tuple_hashable(key, left_names, left_idx)
			if check_left_unique:
				if key in left_keys_seen:
					raise PyKeyedValueError(
						f"Join expectation '{expect}' violated: Left side has duplicate key {key}"
					)
				left_keys_seen.add(key)

			if kind == 'cross':
				emitted.extend((left_idx, right_idx) for right_idx in range(other._length))
				continue

			matches = right_index.get(key)
			if kind == 'semi' or kind == 'anti':
				if bool(matches) == (kind == 'semi'):
					emitted.append((left_idx, None))
			elif matches:
				for right_idx in matches:
					matched_right.add(right_idx)
					emitted.append((left_idx, right_idx))
			elif kind in ('left', 'outer'):
				emitted.append((left_idx, None))

		if kind in ('right', 'outer'):
			emitted.extend(
				(None, right_idx) for right_idx in range(other._length) if right_idx not in matched_right
			)

		if kind == 'semi' or kind == 'anti':
			return self.copy()._take_inplace(left_idx for left_idx, _ in emitted)

		# ------------------------------------------------------------------
		# 3. Build result columns, names preserved (join columns coalesced)
		# ------------------------------------------------------------------
		coalesce_from = dict(pairs)
		seen = set(self.column_names)
		result_cols = []

		for col in self._underlying:
			values = col._underlying
			if col._name in coalesce_from:
				right_values = other._column(coalesce_from[col._name])._underlying
				data = [values[l] if l is not None else right_values[r] for l, r in emitted]
			else:
				data = [values[l] if l is not None else None for l, _ in emitted]
			result_cols.append(PyVector(data, name=col._name))

		dropped = set(right_names)
		for col in other._underlying:
			if col._name in dropped:
				continue
			values = col._underlying
			new_name = _uniquify(col._name, seen)
			seen.add(new_name)
			data = [values[r] if r is not None else None for _, r in emitted]
			result_cols.append(PyVector(data, name=new_name))

		return PyTable(result_cols)

	#-----------------------------------------------------
	# Row mutation
	#-----------------------------------------------------

	def _row_values(self, row):
		names = self.column_names
		if isinstance(row, dict):
			missing = [n for n in names if n not in row]
			extra = [k for k in row if k not in names]
			if missing or extra:
				raise PyKeyedKeyError(
					f"Row keys must match table columns; missing {missing}, unexpected {extra}"
				)
			return [row[n] for n in names]
		values = list(row)
		if len(values) != len(names):
			raise PyKeyedValueError(
				f"Row has {len(values)} values, but table has {len(names)} columns"
			)
		return values

	def insert(self, index, row):
		"""Insert one row (dict by name, or sequence by position) before ``index``."""
		if not -self._length <= index <= self._length:
			raise PyKeyedIndexError(f"Insert position {index} out of range for table with {self._length} rows")
		if index < 0:
			index += self._length
		values = self._row_values(row)
		self._underlying = [
			PyVector(col._underlying[:index] + (v,) + col._underlying[index:], name=col._name)
			for col, v in zip(self._underlying, values)
		]
		self._length += 1
		return self

	def push(self, row):
		"""Append one row at the end; returns self for chaining."""
		return self.insert(self._length, row)

	def append(self, other):
		"""Append all rows of ``other`` (matched by column name); returns self."""
		other = _unwrap(other)
		if not isinstance(other, PyTable):
			raise PyKeyedTypeError(f"Cannot append {type(other).__name__} to PyTable")
		if not self._underlying:
			self._underlying = [col.copy() for col in other._underlying]
			self._length = other._length
			self._column_map = self._build_column_map()
			return self
		if set(self.column_names) != set(other.column_names):
			raise PyKeyedValueError(
				f"Cannot append table with columns {other.column_names} to table with columns {self.column_names}"
			)
		self._underlying = [
			PyVector(col._underlying + other._column(col._name)._underlying, name=col._name)
			for col in self._underlying
		]
		self._length += other._length
		return self

	def delete_rows(self, rows):
		"""Delete rows by position, position list, slice or boolean mask; returns self."""
		selected = resolve_rows(self, rows)
		if selected is ALL:
			drop = set(range(self._length))
		elif isinstance(selected, int):
			drop = {selected}
		else:
			drop = set(selected)
		return self._take_inplace(i for i in range(self._length) if i not in drop)

	def head(self, n=5):
		if n < 0:
			raise PyKeyedValueError("head() needs a non-negative row count")
		return self.copy()._take_inplace(range(min(n, self._length)))

	def tail(self, n=5):
		if n < 0:
			raise PyKeyedValueError("tail() needs a non-negative row count")
		return self.copy()._take_inplace(range(max(self._length - n, 0), self._length))

	#-----------------------------------------------------
	# Column mutation
	#-----------------------------------------------------

	def permute(self, order):
		"""
		Reorder columns in place: new position i holds the column previously at order[i].
		Returns self for chaining.
		"""
		order = list(order)
		if sorted(order) != list(range(self.ncol)):
			raise PyKeyedValueError(
				f"Column order {order} is not a permutation of 0..{self.ncol - 1}"
			)
		self._underlying = [self._underlying[j] for j in order]
		self._column_map = self._build_column_map()
		return self

	def rename_column(self, old_name, new_name):
		"""Rename a column (modifies in place, returns self for chaining)"""
		if new_name != old_name and new_name in self.column_names:
			raise PyKeyedValueError(f"Column '{new_name}' already exists")
		for i, col in enumerate(self._underlying):
			if col._name == old_name:
				self._underlying[i] = col.copy(name=new_name)
				self._column_map = self._build_column_map()
				return self
		raise _missing_col_error(old_name)
