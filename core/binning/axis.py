# core/binning/axis.py
"""
Axis and observable definitions.

An Axis is a named, strictly increasing sequence of bin edges. An Observable
carries the current coordinate along one axis; the ordered ObservableSet of a
histogram is what every function bound to that histogram is defined over.
"""
from __future__ import annotations

import math
from typing import Dict, Iterator, List, Sequence, Tuple, Union

import numpy as np

from core.exceptions import BinResolutionError, HistFuncError, OutOfRangeError


class Axis:
    """Named bin edges for one dimension."""

    def __init__(self, name: str, edges: Sequence[float]):
        arr = np.array(edges, dtype=float)
        if arr.ndim != 1 or arr.size < 2:
            raise HistFuncError(f"Axis '{name}' needs at least two edges")
        if not np.all(np.isfinite(arr)):
            raise HistFuncError(f"Axis '{name}' has non-finite edges")
        if np.any(np.diff(arr) <= 0):
            raise HistFuncError(f"Axis '{name}' edges must be strictly increasing")
        arr.setflags(write=False)
        self.name = name
        self._edges = arr

    @classmethod
    def uniform(cls, name: str, bins: int, lo: float, hi: float) -> "Axis":
        if bins < 1:
            raise HistFuncError(f"Axis '{name}' needs at least one bin, got {bins}")
        if not hi > lo:
            raise HistFuncError(f"Axis '{name}' range [{lo}, {hi}] is empty")
        return cls(name, np.linspace(lo, hi, bins + 1))

    @property
    def boundaries(self) -> np.ndarray:
        return self._edges

    @property
    def num_bins(self) -> int:
        return self._edges.size - 1

    @property
    def min(self) -> float:
        return float(self._edges[0])

    @property
    def max(self) -> float:
        return float(self._edges[-1])

    @property
    def widths(self) -> np.ndarray:
        return np.diff(self._edges)

    @property
    def is_uniform(self) -> bool:
        w = self.widths
        return bool(np.allclose(w, w[0], rtol=1e-9, atol=0.0))

    def find_bin(self, value: float) -> int:
        """
        Return the bin holding `value`. Bins are half-open [lo, hi) except the
        last one, which also holds the upper edge of the axis.
        """
        x = float(value)
        if math.isnan(x) or x < self.min or x > self.max:
            raise BinResolutionError(
                f"Value {value} outside range [{self.min}, {self.max}] of axis '{self.name}'"
            )
        idx = int(np.searchsorted(self._edges, x, side="right")) - 1
        return min(idx, self.num_bins - 1)

    def center(self, ibin: int) -> float:
        if not 0 <= ibin < self.num_bins:
            raise OutOfRangeError(f"Bin {ibin} not in [0, {self.num_bins}) on axis '{self.name}'")
        return float(0.5 * (self._edges[ibin] + self._edges[ibin + 1]))

    def __repr__(self) -> str:
        return f"<Axis {self.name}: {self.num_bins} bins in [{self.min}, {self.max}]>"


class Observable:
    """Current coordinate along a named axis."""

    def __init__(self, axis: Axis, value: float = None):
        self.axis = axis
        self.value = axis.center(0) if value is None else float(value)

    @property
    def name(self) -> str:
        return self.axis.name

    @property
    def min(self) -> float:
        return self.axis.min

    @property
    def max(self) -> float:
        return self.axis.max

    def __repr__(self) -> str:
        return f"<Observable {self.name}={self.value}>"


class ObservableSet:
    """
    Ordered, fixed-membership set of observables. Values of the members can
    change; membership cannot.
    """

    def __init__(self, observables: Sequence[Observable]):
        names = [o.name for o in observables]
        dup = {n for n in names if names.count(n) > 1}
        if dup:
            raise HistFuncError(f"Duplicate observable names: {', '.join(sorted(dup))}")
        self._items: Tuple[Observable, ...] = tuple(observables)
        self._by_name: Dict[str, Observable] = {o.name: o for o in observables}

    @property
    def names(self) -> List[str]:
        return [o.name for o in self._items]

    def find(self, name: str) -> Union[Observable, None]:
        return self._by_name.get(name)

    def __getitem__(self, key: Union[int, str]) -> Observable:
        if isinstance(key, str):
            try:
                return self._by_name[key]
            except KeyError:
                raise OutOfRangeError(f"No observable named '{key}'")
        if not 0 <= key < len(self._items):
            raise OutOfRangeError(f"Observable index {key} not in [0, {len(self._items)})")
        return self._items[key]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Observable]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def values(self) -> Tuple[float, ...]:
        return tuple(o.value for o in self._items)

    def assign(self, values: Dict[str, float]) -> None:
        for name, value in values.items():
            self[name].value = float(value)

    def __repr__(self) -> str:
        return f"<ObservableSet ({', '.join(self.names)})>"
