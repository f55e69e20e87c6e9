"""Caller-supplied overrides of the derived aesthetic mapping and elements."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Overrides:
    """Explicit mapping overrides and extra rendering elements.

    Precedence
    ----------
    - ``mapping`` keys replace derived keys of the same role; a ``None`` value
      removes the role from the result.
    - ``elements`` are appended after the fixed elements of a plotting helper.
      Whether a later element supersedes an earlier one is decided by the
      grammar renderer (layout elements apply in order, geometries accumulate).

    Examples
    --------
    >>> Overrides(mapping={"color": None, "y": "value"}).merge_mapping({"x": "x", "y": "f(x)", "color": "f"})
    {'x': 'x', 'y': 'value'}
    """

    mapping: Mapping[str, str | None] = field(default_factory=dict)
    elements: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        for role, column in self.mapping.items():
            if not isinstance(role, str):
                raise TypeError(f"Mapping roles must be strings, got {type(role).__name__}")
            if column is not None and not isinstance(column, str):
                raise TypeError(
                    f"Mapping for role {role!r} must be a column name, got {type(column).__name__}"
                )
        object.__setattr__(self, "mapping", dict(self.mapping))
        object.__setattr__(self, "elements", tuple(self.elements))

    @classmethod
    def from_call(cls, elements: Iterable[Any] = (), mapping: Mapping[str, Any] | None = None) -> "Overrides":
        """Build overrides from the ``*elements, **mapping`` of a helper call."""
        return cls(mapping=dict(mapping or {}), elements=tuple(elements))

    def merge_mapping(self, derived: Mapping[str, str]) -> dict[str, str]:
        """Return ``derived`` with these overrides applied on top."""
        merged = dict(derived)
        for role, column in self.mapping.items():
            if column is None:
                merged.pop(role, None)
            else:
                merged[role] = column
        return merged

    def combine_elements(self, fixed: Iterable[Any] = ()) -> tuple[Any, ...]:
        """Return ``fixed`` followed by the override elements."""
        return (*fixed, *self.elements)


__all__ = ["Overrides"]
