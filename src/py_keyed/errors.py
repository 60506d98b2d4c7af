class PyKeyedError(Exception):
    """Base exception for py-keyed library."""
    pass


class PyKeyedKeyError(PyKeyedError, KeyError):
    """Raised when a column/key is missing."""
    pass


class PyKeyedTypeError(PyKeyedError, TypeError):
    """Raised for invalid types in API calls."""
    pass


class PyKeyedValueError(PyKeyedError, ValueError):
    """Raised for invalid values or mismatched lengths."""
    pass


class PyKeyedIndexError(PyKeyedError, IndexError):
    """Raised for invalid indexing operations."""
    pass


class KeyValidationError(PyKeyedValueError):
    """Raised when a requested key column is not a column of the table."""
    pass
