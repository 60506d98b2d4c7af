"""
Sorting and deduplication default to the key.
"""

import pytest
from py_keyed import PyTable, KeyedTable
from py_keyed.errors import PyKeyedValueError


def _table():
	return PyTable({
		'a': [2, 1, 2, 1],
		'b': [1, 2, 0, 1],
		'c': ['p', 'q', 'r', 's'],
	})


class TestSort:
	"""Key columns give the sort precedence"""

	def test_default_sort_uses_key(self):
		kt = KeyedTable(_table(), ['a', 'b'])
		result = kt.sort()
		assert list(result['a']) == [1, 1, 2, 2]
		assert list(result['b']) == [1, 2, 0, 1]
		assert list(result['c']) == ['s', 'q', 'r', 'p']

	def test_matches_plain_sort_on_key(self):
		kt = KeyedTable(_table(), ['b', 'a'])
		assert kt.sort().table == _table().sort(['b', 'a'])

	def test_key_order_changes_sort(self):
		ab = KeyedTable(_table(), ['a', 'b'])
		ba = KeyedTable(_table(), ['b', 'a'])
		assert ab == ba
		assert ab.sort().table != ba.sort().table

	def test_explicit_columns_override_key(self):
		kt = KeyedTable(_table(), ['a', 'b'])
		result = kt.sort(by='c', reverse=True)
		assert list(result['c']) == ['s', 'r', 'q', 'p']
		assert result.key == ('a', 'b')

	def test_sort_returns_new_table(self):
		kt = KeyedTable(_table(), ['a', 'b'])
		result = kt.sort()
		assert result is not kt
		assert list(kt['c']) == ['p', 'q', 'r', 's']
		assert result.key == kt.key

	def test_sort_inplace(self):
		kt = KeyedTable(_table(), ['a', 'b'])
		assert kt.sort_inplace() is kt
		assert list(kt['c']) == ['s', 'q', 'r', 'p']
		assert kt.key == ('a', 'b')

	def test_empty_key_leaves_order(self):
		kt = KeyedTable(_table(), [])
		assert kt.sort().table == _table()


class TestUnique:
	"""Key columns identify rows"""

	def test_default_unique_uses_key(self):
		kt = KeyedTable(_table(), 'a')
		result = kt.unique()
		assert list(result['a']) == [2, 1]
		assert list(result['c']) == ['p', 'q']
		assert result.key == ('a',)

	def test_rows_differing_outside_key_are_duplicates(self):
		kt = KeyedTable(PyTable({
			'id': [1, 1, 2],
			'value': ['first', 'second', 'third'],
		}), 'id')
		assert kt.unique().to_dict() == {'id': [1, 2], 'value': ['first', 'third']}

	def test_composite_key(self):
		kt = KeyedTable(PyTable({
			'a': [1, 1, 1, 2],
			'b': [1, 2, 1, 1],
			'c': [0, 0, 0, 0],
		}), ['a', 'b'])
		assert kt.unique().nrow == 3

	def test_explicit_columns_override_key(self):
		kt = KeyedTable(_table(), 'a')
		result = kt.unique(kt.column_names)
		assert result.nrow == 4
		assert result.key == ('a',)

	def test_unique_inplace(self):
		kt = KeyedTable(_table(), 'a')
		assert kt.unique_inplace() is kt
		assert kt.nrow == 2
		assert kt.key == ('a',)

	def test_empty_key_is_delegated_error(self):
		kt = KeyedTable(_table(), [])
		with pytest.raises(PyKeyedValueError):
			kt.unique()
