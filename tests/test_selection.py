import pytest
from py_keyed import PyTable, PyVector
from py_keyed.selection import (
	parse_selection,
	SelectAll,
	SelectCell,
	SelectColumn,
	SelectColumns,
	SelectRows,
	SelectRowsColumn,
)
from py_keyed.errors import PyKeyedKeyError, PyKeyedIndexError, PyKeyedTypeError, PyKeyedValueError


@pytest.fixture
def t():
	return PyTable({'a': [1, 2, 3], 'b': ['x', 'y', 'z'], 'c': [0.5, 1.5, 2.5]})


@pytest.mark.parametrize("key, expected", [
	(slice(None), SelectAll()),
	((slice(None), slice(None)), SelectAll()),
	('a', SelectColumn('a')),
	(['a', 'c'], SelectColumns(('a', 'c'))),
	(('c', 'a'), SelectColumns(('c', 'a'))),
	((slice(None), ['b']), SelectColumns(('b',))),
	((slice(None), slice(1, None)), SelectColumns(('b', 'c'))),
	((0, 'b'), SelectCell(0, 'b')),
	((-1, 2), SelectCell(2, 'c')),
	(1, SelectRows((1,), ('a', 'b', 'c'))),
	(slice(0, 2), SelectRows((0, 1), ('a', 'b', 'c'))),
	([0, 2], SelectRows((0, 2), ('a', 'b', 'c'))),
	([True, False, True], SelectRows((0, 2), ('a', 'b', 'c'))),
	((slice(1, None), 'a'), SelectRowsColumn((1, 2), 'a')),
	((0, ['a', 'b']), SelectRows((0,), ('a', 'b'))),
])
def test_parse_selection(t, key, expected):
	assert parse_selection(t, key) == expected


def test_vector_mask(t):
	mask = t['a'] > 1
	assert parse_selection(t, mask) == SelectRows((1, 2), ('a', 'b', 'c'))


def test_vector_stands_for_its_name(t):
	assert parse_selection(t, (slice(None), t['b'])) == SelectColumn('b')


def test_empty_column_list(t):
	assert parse_selection(t, []) == SelectColumns(())
	assert t[[]].size() == (0, 0)


def test_results_by_shape(t):
	assert isinstance(t['a'], PyVector)
	assert t[0, 'b'] == 'x'
	assert list(t[1:, 'a']) == [2, 3]
	assert t[['a']].column_names == ['a']
	assert t[0].nrow == 1
	assert t[:] == t
	assert t[:] is not t


def test_missing_column(t):
	with pytest.raises(PyKeyedKeyError):
		parse_selection(t, 'nope')


def test_row_out_of_range(t):
	with pytest.raises(PyKeyedIndexError):
		parse_selection(t, 3)
	with pytest.raises(PyKeyedIndexError):
		parse_selection(t, (-4, 'a'))


def test_column_position_out_of_range(t):
	with pytest.raises(PyKeyedIndexError):
		parse_selection(t, (0, 5))


def test_wrong_mask_length(t):
	with pytest.raises(PyKeyedValueError):
		parse_selection(t, [True, False])


def test_too_many_indices(t):
	with pytest.raises(PyKeyedKeyError):
		parse_selection(t, (0, 'a', 1))


def test_unsupported_row_index(t):
	with pytest.raises(PyKeyedTypeError):
		parse_selection(t, 1.5)


@pytest.mark.parametrize("key", [
	slice('a', 'c'),
	slice(0, 2.0),
	(slice(None), slice('a', 'b')),
])
def test_non_integer_slices(t, key):
	with pytest.raises(PyKeyedTypeError):
		parse_selection(t, key)


def test_zero_step_slice(t):
	with pytest.raises(PyKeyedValueError):
		parse_selection(t, slice(None, None, 0))
