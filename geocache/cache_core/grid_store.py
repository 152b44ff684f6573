"""
Sparse Grid Store
=================

Holds cache values only for cells that were mutated away from their
generated default. An entry of 0 marks a cell as permanently emptied.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from geocache.cache_core.grid import CellCoord


class SparseGridStore:
    """
    Override map from cell to cache value.

    Absence of a key means "use the generated default". Keys are CellCoord
    values, so recomputed coordinates find the same entry.
    """

    def __init__(self):
        self._cells: Dict[CellCoord, int] = {}

    def get(self, cell: CellCoord) -> Optional[int]:
        """Override value for a cell, or None if the cell was never mutated."""
        return self._cells.get(CellCoord(*cell))

    def set(self, cell: CellCoord, value: int) -> None:
        """
        Record an override.

        Raises:
            ValueError: If value is negative or not a power of two (0 allowed).
        """
        value = int(value)
        if value < 0 or (value & (value - 1)) != 0:
            raise ValueError(f"Cache value must be 0 or a power of two, got {value}")
        self._cells[CellCoord(*cell)] = value

    def is_emptied(self, cell: CellCoord) -> bool:
        """True if the cell was explicitly emptied."""
        return self._cells.get(CellCoord(*cell)) == 0

    def __contains__(self, cell) -> bool:
        return CellCoord(*cell) in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[CellCoord]:
        return iter(self._cells)

    def items(self) -> Iterator[Tuple[CellCoord, int]]:
        return iter(self._cells.items())

    def to_dict(self) -> Dict[str, int]:
        """Serializable form keyed by "i,j"."""
        return {cell.key(): value for cell, value in self._cells.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "SparseGridStore":
        store = cls()
        for key, value in data.items():
            store.set(CellCoord.parse(key), value)
        return store
