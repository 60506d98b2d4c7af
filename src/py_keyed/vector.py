import operator
import math
import warnings

from .errors import PyKeyedTypeError
from .errors import PyKeyedValueError
from .typing import DataType
from .typing import infer_dtype


# Rolling hash over values: Mersenne prime modulus (2^61 - 1) and base
_FP_P = (1 << 61) - 1
_FP_B = 1315423911

_NONE_HASH = 0x9E3779B97F4A7C15
_NAN_HASH = 0xDEADBEEFCAFEBABE


def _hash_value(x) -> int:
	"""Hash of one cell value; values that compare equal hash equal."""
	if x is None:
		return _NONE_HASH

	if isinstance(x, float) and math.isnan(x):
		return _NAN_HASH

	if isinstance(x, (list, tuple)):
		h = 0
		for elem in x:
			h = (h * _FP_B + _hash_value(elem)) % _FP_P
		return h

	# Unordered containers: combine members commutatively
	if isinstance(x, dict):
		return sum(_hash_value(k) * _FP_B + _hash_value(v) for k, v in x.items()) % _FP_P
	if isinstance(x, (set, frozenset)):
		return sum(_hash_value(e) for e in x) % _FP_P

	try:
		return hash(x)
	except TypeError:
		# Unhashable objects of one type share a bucket
		return hash(type(x).__qualname__)


class PyVector():
	""" Named, immutable column of values with an inferred dtype """
	_dtype = None
	_underlying = ()
	_name = None

	def __init__(self, initial=(), dtype=None, name=None):
		self._underlying = tuple(initial)
		self._name = name

		if dtype is not None and not isinstance(dtype, DataType):
			dtype = DataType(dtype)
		if dtype is None:
			dtype = infer_dtype(self._underlying)
		self._dtype = dtype
		self._fp = None

	def schema(self):
		"""DataType of this vector; None when it is empty and untyped."""
		return self._dtype

	def fingerprint(self) -> int:
		"""Order-sensitive hash of the values, cached (storage never changes)."""
		if self._fp is None:
			total = 0
			for x in self._underlying:
				total = (total * _FP_B + _hash_value(x)) % _FP_P
			self._fp = total
		return self._fp

	def copy(self, new_values=None, name=...):
		# name=... keeps the current name; name=None clears it
		use_name = self._name if name is ... else name
		if new_values is None:
			return PyVector(self._underlying, dtype=self._dtype, name=use_name)
		return PyVector(new_values, name=use_name)

	def __repr__(self):
		from .display import _printr
		return _printr(self)

	def __iter__(self):
		return iter(self._underlying)

	def __len__(self):
		return len(self._underlying)

	def __bool__(self):
		"""True when non-empty. Warns for boolean vectors, where 'if mask:' is usually a mistake."""
		if self._underlying and self._dtype is not None and self._dtype.kind is bool:
			warnings.warn(
				"Boolean PyVector used as a truth value; this tests for emptiness, "
				"not for any True element",
				stacklevel=2
			)
		return bool(self._underlying)

	def __getitem__(self, key):
		""" Integer -> value. Slice, boolean mask or list of positions -> PyVector """
		if isinstance(key, int) and not isinstance(key, bool):
			return self._underlying[key]

		if isinstance(key, slice):
			return PyVector(self._underlying[key], dtype=self._dtype, name=self._name)

		if isinstance(key, (PyVector, list)) and len(key) and all(isinstance(e, bool) for e in key):
			if len(key) != len(self):
				raise PyKeyedValueError(
					f"Boolean mask has length {len(key)}, but vector has {len(self)} elements"
				)
			return PyVector((x for x, keep in zip(self, key) if keep), dtype=self._dtype, name=self._name)

		if isinstance(key, (PyVector, list, tuple)) and all(isinstance(e, int) and not isinstance(e, bool) for e in key):
			return PyVector((self._underlying[i] for i in key), dtype=self._dtype, name=self._name)

		raise PyKeyedTypeError(f'Vector indices must be integers, slices, boolean masks or integer lists, not {type(key).__name__}')

	#-----------------------------------------------------
	# Elementwise comparison -> boolean masks
	#-----------------------------------------------------

	def _compare(self, other, op):
		if hasattr(other, '__iter__') and not isinstance(other, (str, bytes)):
			if len(self) != len(other):
				raise PyKeyedValueError(
					f"Cannot compare vectors of length {len(self)} and {len(other)}"
				)
			pairs = zip(self, other)
		else:
			pairs = ((x, other) for x in self)
		# Missing values never satisfy a comparison
		values = tuple(False if (x is None or y is None) else bool(op(x, y)) for x, y in pairs)
		return PyVector(values, dtype=DataType(bool))

	def __eq__(self, other):
		return self._compare(other, operator.eq)

	def __ne__(self, other):
		return self._compare(other, operator.ne)

	def __lt__(self, other):
		return self._compare(other, operator.lt)

	def __le__(self, other):
		return self._compare(other, operator.le)

	def __gt__(self, other):
		return self._compare(other, operator.gt)

	def __ge__(self, other):
		return self._compare(other, operator.ge)

	def __and__(self, other):
		return self._compare(other, operator.and_)

	def __or__(self, other):
		return self._compare(other, operator.or_)

	__rand__ = __and__
	__ror__ = __or__

	def __invert__(self):
		if self._dtype is None or self._dtype.kind is not bool:
			raise PyKeyedTypeError("Only boolean vectors can be inverted")
		return PyVector(tuple(not x for x in self._underlying), dtype=DataType(bool), name=self._name)

	# Elementwise __eq__ makes vectors unhashable; use fingerprint() instead
	__hash__ = None

	def equals(self, other):
		"""Whole-vector value equality (a single bool)."""
		if not isinstance(other, PyVector):
			return False
		return self._underlying == other._underlying
