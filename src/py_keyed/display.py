"""Display and repr logic for PyVector, PyTable and KeyedTable."""

from __future__ import annotations
from datetime import date
from typing import List


# How many rows/columns to show before inserting "..."
MAX_HEAD_ROWS = 5
MAX_HEAD_COLS = 5

# Suffix marking key columns in a keyed table header
KEY_MARKER = "*"


def _kind(col):
	return col._dtype.kind if col._dtype is not None else None


def _kind_name(col) -> str:
	return col._dtype.kind.__name__ if col._dtype is not None else "object"


def _needs_quoting(name: str) -> bool:
	"""A name needs quoting if it contains anything outside [A-Za-z0-9_]
	OR has leading/trailing whitespace."""
	if not name:
		return False
	if name != name.strip():
		return True
	return not all(c.isalnum() or c == "_" for c in name)


def _format_column(col, max_preview: int = MAX_HEAD_ROWS) -> List[str]:
	"""Returns a list of strings representing that column, truncated for display."""
	vals = col._underlying
	truncated = len(vals) > max_preview * 2
	if truncated:
		preview = list(vals[:max_preview]) + list(vals[-max_preview:])
	else:
		preview = list(vals)

	kind = _kind(col)
	out = []
	for v in preview:
		if v is None:
			out.append("None")
		elif kind is float and isinstance(v, float):
			out.append(f"{v:.1f}" if v.is_integer() else f"{v:g}")
		elif kind is date:
			out.append(v.isoformat())
		elif kind is str:
			out.append(repr(v))
		else:
			out.append(str(v))

	if truncated:
		out.insert(max_preview, "...")
	return out


def _is_numeric_name(dtype_name: str) -> bool:
	return dtype_name in ('int', 'float')


def _align(cells: List[str], width: int, dtype_name: str) -> List[str]:
	if _is_numeric_name(dtype_name):
		return [s.rjust(width) for s in cells]
	return [s.ljust(width) for s in cells]


def _footer(shape, dtype_list, truncated=False, shown=MAX_HEAD_COLS, key=None) -> str:
	"""Generate footer line based on shape and dtypes."""
	rows, cols = shape
	if truncated:
		d = ", ".join(dtype_list[:shown]) + ", ..., " + ", ".join(dtype_list[-shown:])
	else:
		d = ", ".join(dtype_list)
	if key is None:
		return f"# {rows}×{cols} table <{d}>"
	return f"# {rows}×{cols} keyed table <{d}> key=({', '.join(key)})"


def _repr_vector(v) -> str:
	"""Pretty repr for a PyVector."""
	formatted = _format_column(v)
	dtype_name = _kind_name(v)

	header_text = None
	if v._name:
		header_text = repr(v._name) if _needs_quoting(v._name) else v._name

	width = max([len(s) for s in formatted] + [len(header_text or "")])

	lines = []
	if header_text is not None:
		lines.extend(_align([header_text], width, dtype_name))
	lines.extend(_align(formatted, width, dtype_name))
	lines.append("")
	lines.append(f"# {len(v)} element vector <{dtype_name}>")
	return "\n".join(lines)


def _repr_table(tbl, key=None) -> str:
	"""Pretty repr for a PyTable; ``key`` marks the key columns of a KeyedTable."""
	cols = tbl.cols()
	num_cols = len(cols)
	key_set = set(key or ())

	if num_cols == 0:
		if key is None:
			return "# 0×0 table"
		return "# 0×0 keyed table key=()"

	truncated = num_cols > MAX_HEAD_COLS * 2
	if truncated:
		col_indices = list(range(MAX_HEAD_COLS)) + list(range(num_cols - MAX_HEAD_COLS, num_cols))
	else:
		col_indices = list(range(num_cols))

	headers = []
	dtypes_displayed = []
	formatted_cols = []
	for idx in col_indices:
		col = cols[idx]
		name = repr(col._name) if _needs_quoting(col._name) else col._name
		if col._name in key_set:
			name += KEY_MARKER
		headers.append(name)
		dtypes_displayed.append(_kind_name(col))
		formatted_cols.append(_format_column(col))

	if truncated:
		nrows = len(formatted_cols[0])
		formatted_cols.insert(MAX_HEAD_COLS, ["..."] * nrows)
		headers.insert(MAX_HEAD_COLS, "...")
		dtypes_displayed.insert(MAX_HEAD_COLS, "...")

	# Pad columns and headers to consistent widths
	aligned_cols = []
	aligned_headers = []
	for header, cells, dtype_name in zip(headers, formatted_cols, dtypes_displayed):
		width = max([len(s) for s in cells] + [len(header)])
		aligned_cols.append(_align(cells, width, dtype_name))
		aligned_headers.extend(_align([header], width, dtype_name))

	lines = ["  ".join(aligned_headers)]
	for r in range(len(aligned_cols[0])):
		lines.append("  ".join(col[r] for col in aligned_cols))

	lines.append("")
	dtypes_all = [_kind_name(col) for col in cols]
	lines.append(_footer(tbl.size(), dtypes_all, truncated, MAX_HEAD_COLS, key=key))
	return "\n".join(lines)


def _printr(obj, key=None) -> str:
	"""Entry point used by the __repr__ methods."""
	from .vector import PyVector
	if isinstance(obj, PyVector):
		return _repr_vector(obj)
	return _repr_table(obj, key=key)
