"""Column name sanitization and uniquification utilities."""

from __future__ import annotations
import re


def _sanitize_user_name(name) -> str | None:
	"""Sanitize column name to valid Python identifier.

	Rules:
	- Convert to lowercase
	- Replace runs of non-alphanumeric chars (except _) with single _
	- Strip leading/trailing underscores
	- Prefix with 'c' if starts with digit
	- Return None if empty after sanitization
	"""
	if not isinstance(name, str):
		name = str(name)

	sanitized = re.sub(r'[^a-z0-9_]+', '_', name.lower())
	sanitized = sanitized.strip('_')

	if sanitized == "":
		return None

	if sanitized[0].isdigit():
		sanitized = "c" + sanitized

	return sanitized


def _uniquify(base: str, seen) -> str:
	"""Make a unique name by adding __2, __3, etc if needed."""
	if base not in seen:
		return base

	i = 2
	while f"{base}__{i}" in seen:
		i += 1

	return f"{base}__{i}"


def _system_name(idx: int) -> str:
	"""Name given to an unnamed column at position idx."""
	return f"col{idx}_"
