"""
Join key defaults and key propagation for the three keyed join forms.
"""

import logging

import pytest
from py_keyed import PyTable, KeyedTable, join
from py_keyed.errors import PyKeyedValueError, PyKeyedTypeError


def _left():
	return KeyedTable(PyTable({
		'a': [1, 2, 3],
		'b': [10, 20, 30],
		'v': ['p', 'q', 'r'],
	}), ['a', 'b'])


def _right():
	return KeyedTable(PyTable({
		'b': [20, 30, 40],
		'c': [7, 8, 9],
		'w': ['s', 't', 'u'],
	}), ['b', 'c'])


class TestBothKeyed:
	"""KeyedTable ⋈ KeyedTable"""

	def test_joins_on_key_intersection(self):
		result = join(_left(), _right())
		assert isinstance(result, KeyedTable)
		assert result.column_names == ['a', 'b', 'v', 'c', 'w']
		assert list(result['b']) == [20, 30]
		assert list(result['c']) == [7, 8]

	def test_result_key_is_union_of_keys(self):
		result = join(_left(), _right())
		assert result.key == ('a', 'b', 'c')

	def test_method_form(self):
		assert _left().join(_right()).identical(join(_left(), _right()))

	def test_explicit_on_overrides_keys(self):
		left = _left()
		right = KeyedTable(PyTable({'a': [1, 3], 'b': [99, 30], 'z': [0, 1]}), ['a'])
		result = left.join(right, on='a')
		assert result.column_names == ['a', 'b', 'v', 'b__2', 'z']
		assert list(result['b__2']) == [99, 30]
		assert result.key == ('a', 'b')

	def test_left_join(self):
		result = join(_left(), _right(), kind='left')
		assert list(result['a']) == [1, 2, 3]
		assert list(result['c']) == [None, 7, 8]
		assert result.key == ('a', 'b', 'c')

	def test_right_join(self):
		result = join(_left(), _right(), kind='right')
		assert list(result['b']) == [20, 30, 40]
		assert list(result['a']) == [2, 3, None]
		assert result.key == ('a', 'b', 'c')

	def test_outer_join(self):
		result = join(_left(), _right(), kind='outer')
		assert result.nrow == 4
		assert list(result['b']) == [10, 20, 30, 40]
		assert result.key == ('a', 'b', 'c')

	def test_semi_join_keeps_left_key_only(self):
		result = join(_left(), _right(), kind='semi')
		assert result.column_names == ['a', 'b', 'v']
		assert list(result['a']) == [2, 3]
		assert result.key == ('a', 'b')

	def test_anti_join_keeps_left_key_only(self):
		result = join(_left(), _right(), kind='anti')
		assert list(result['a']) == [1]
		assert result.key == ('a', 'b')

	def test_key_dropped_when_join_removes_column(self):
		"""Right join columns are dropped, so a right key on them disappears"""
		right = KeyedTable(PyTable({'rb': [20, 30], 'x': [1, 2]}), ['rb', 'x'])
		result = join(_left(), right, on=[('b', 'rb')])
		assert 'rb' not in result.column_names
		assert result.key == ('a', 'b', 'x')

	def test_key_dropped_when_join_renames_column(self):
		left = KeyedTable(PyTable({'id': [1, 2], 'n': [5, 6]}), ['id'])
		right = KeyedTable(PyTable({'id': [1, 2], 'n': [7, 8]}), ['n'])
		result = join(left, right, on='id')
		assert result.column_names == ['id', 'n', 'n__2']
		# 'n' survives only as the left column name
		assert result.key == ('id', 'n')

	def test_cross_join(self):
		left = KeyedTable(PyTable({'x': [1, 2]}), 'x')
		right = KeyedTable(PyTable({'y': ['a', 'b', 'c']}), 'y')
		result = join(left, right, kind='cross')
		assert result.nrow == 6
		assert result.key == ('x', 'y')

	def test_disjoint_keys_delegate_error(self):
		"""An empty default join-column set falls through to PyTable.join"""
		left = KeyedTable(PyTable({'a': [1], 'b': [2]}), 'a')
		right = KeyedTable(PyTable({'a': [1], 'b': [2]}), 'b')
		with pytest.raises(PyKeyedValueError, match="at least 1 join key"):
			join(left, right)

	def test_dropped_keys_logged(self, caplog):
		caplog.set_level(logging.DEBUG, logger="py_keyed.keyed")
		right = KeyedTable(PyTable({'rb': [20], 'x': [1]}), ['rb'])
		join(_left(), right, on=[('b', 'rb')])
		assert "dropped key column" in caplog.text


class TestLeftKeyed:
	"""KeyedTable ⋈ PyTable"""

	def test_joins_on_left_key_present_in_right(self):
		right = PyTable({'b': [10, 30], 'extra': ['e1', 'e3']})
		result = join(_left(), right)
		assert isinstance(result, KeyedTable)
		assert list(result['a']) == [1, 3]
		assert list(result['extra']) == ['e1', 'e3']

	def test_result_key_is_left_key(self):
		right = PyTable({'a': [1, 2], 'b': [10, 20], 'extra': [0, 1]})
		result = _left().join(right)
		assert result.column_names == ['a', 'b', 'v', 'extra']
		assert result.key == ('a', 'b')

	def test_result_keeps_left_wrapper_type(self):
		class Ledger(KeyedTable):
			pass

		ledger = Ledger(PyTable({'id': [1, 2], 'amt': [5, 6]}), 'id')
		result = ledger.join(PyTable({'id': [2], 'who': ['z']}))
		assert type(result) is Ledger
		assert result.key == ('id',)


class TestRightKeyed:
	"""PyTable ⋈ KeyedTable"""

	def test_result_is_not_keyed(self):
		left = PyTable({'b': [20, 40], 'n': [1, 2]})
		result = join(left, _right())
		assert isinstance(result, PyTable)
		assert not isinstance(result, KeyedTable)
		assert list(result['c']) == [7, 9]

	def test_method_form(self):
		left = PyTable({'b': [20, 40], 'n': [1, 2]})
		assert left.join(_right()) == join(left, _right())
		assert isinstance(left.join(_right()), PyTable)

	def test_defaults_to_right_key_in_left_columns(self):
		left = PyTable({'c': [8, 9], 'b': [30, 40]})
		result = left.join(_right(), kind='left')
		assert result.column_names == ['c', 'b', 'w']
		assert list(result['w']) == ['t', 'u']


def test_plain_tables_delegate():
	left = PyTable({'k': [1, 2]})
	right = PyTable({'k': [2], 'v': ['x']})
	result = join(left, right, on='k')
	assert isinstance(result, PyTable)
	assert result.to_dict() == {'k': [2], 'v': ['x']}


def test_unsupported_operands():
	with pytest.raises(PyKeyedTypeError):
		join(_left(), {'a': [1]})
	with pytest.raises(PyKeyedTypeError):
		join([1, 2], _left())


def test_join_options_pass_through():
	right = KeyedTable(PyTable({'b': [20, 20], 'c': [1, 2]}), ['b'])
	with pytest.raises(PyKeyedValueError, match="many_to_one"):
		join(_left(), right, expect='many_to_one')
