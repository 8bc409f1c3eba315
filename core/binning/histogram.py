# core/binning/histogram.py
"""
Binned histogram template.

Holds the nominal per-bin contents and errors that parameterized functions
read through on every access, and resolves observable coordinates to a
linear bin index (row-major: the last axis varies fastest).
"""
from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from core.binning.axis import Axis, Observable, ObservableSet
from core.exceptions import HistFuncError, OutOfRangeError
from utils.logging_config import get_logger

logger = get_logger(__name__)

AxisKey = Union[int, str]
Coordinates = Union[None, Mapping[str, float], Sequence[float]]


class BinnedHistogram:
    def __init__(self, name: str, axes: Sequence[Axis],
                 contents: Union[Sequence[float], np.ndarray],
                 errors: Optional[Union[Sequence[float], np.ndarray]] = None):
        if not axes:
            raise HistFuncError(f"Histogram '{name}' needs at least one axis")
        self.name = name
        self.axes: Tuple[Axis, ...] = tuple(axes)
        self.shape: Tuple[int, ...] = tuple(a.num_bins for a in self.axes)
        self.observables = ObservableSet([Observable(a) for a in self.axes])

        self._contents = self._as_flat(contents, "contents")
        if errors is None:
            self._errors = np.sqrt(np.abs(self._contents))
        else:
            self._errors = self._as_flat(errors, "errors")
        logger.debug("Histogram '%s' created with shape %s", name, self.shape)

    def _as_flat(self, values, what: str) -> np.ndarray:
        arr = np.array(values, dtype=float)
        if arr.shape != self.shape and arr.shape != (self.num_entries,):
            raise HistFuncError(
                f"Histogram '{self.name}' {what} shape {arr.shape} does not match "
                f"binning {self.shape} ({self.num_entries} bins)"
            )
        return arr.reshape(-1).copy()

    @property
    def num_entries(self) -> int:
        """Total number of bins over all axes."""
        return int(np.prod(self.shape))

    def _check_bin(self, ibin: int) -> int:
        if isinstance(ibin, bool) or not isinstance(ibin, (int, np.integer)) \
                or not 0 <= ibin < self.num_entries:
            raise OutOfRangeError(f"Bin {ibin} not in [0, {self.num_entries}) of histogram '{self.name}'")
        return int(ibin)

    def axis(self, key: AxisKey) -> Axis:
        if isinstance(key, str):
            for a in self.axes:
                if a.name == key:
                    return a
            raise OutOfRangeError(f"Histogram '{self.name}' has no axis '{key}'")
        if not 0 <= key < len(self.axes):
            raise OutOfRangeError(f"Axis index {key} not in [0, {len(self.axes)})")
        return self.axes[key]

    def _coordinates(self, values: Coordinates) -> Tuple[float, ...]:
        if values is None:
            return self.observables.values()
        if isinstance(values, Mapping):
            current = dict(zip(self.observables.names, self.observables.values()))
            unknown = set(values) - set(current)
            if unknown:
                raise HistFuncError(f"Unknown observables for '{self.name}': {', '.join(sorted(unknown))}")
            current.update(values)
            return tuple(current[n] for n in self.observables.names)
        coords = tuple(np.atleast_1d(np.asarray(values, dtype=float)))
        if len(coords) != len(self.axes):
            raise HistFuncError(
                f"Histogram '{self.name}' expects {len(self.axes)} coordinates, got {len(coords)}"
            )
        return coords

    def resolve(self, values: Coordinates = None) -> int:
        """
        Map observable coordinates to the linear bin index.

        `values` may be a mapping by observable name (missing names take the
        current observable value), a sequence in axis order, or None for the
        current observable values.

        Raises:
            BinResolutionError: If any coordinate lies outside its axis.
        """
        coords = self._coordinates(values)
        multi = tuple(a.find_bin(x) for a, x in zip(self.axes, coords))
        return int(np.ravel_multi_index(multi, self.shape))

    def nominal_content(self, ibin: int) -> float:
        return float(self._contents[self._check_bin(ibin)])

    def nominal_error(self, ibin: int) -> float:
        return float(self._errors[self._check_bin(ibin)])

    def set_content(self, ibin: int, value: float, error: Optional[float] = None) -> None:
        """Update one bin in place; bound functions see the change immediately."""
        ibin = self._check_bin(ibin)
        self._contents[ibin] = float(value)
        if error is not None:
            self._errors[ibin] = float(error)

    def boundaries(self, axis: AxisKey) -> np.ndarray:
        return self.axis(axis).boundaries

    def bin_count(self, axis: AxisKey) -> int:
        return self.axis(axis).num_bins

    def axis_range(self, axis: AxisKey) -> Tuple[float, float]:
        a = self.axis(axis)
        return a.min, a.max

    def bin_center(self, ibin: int) -> Tuple[float, ...]:
        multi = np.unravel_index(self._check_bin(ibin), self.shape)
        return tuple(a.center(int(k)) for a, k in zip(self.axes, multi))

    def contents(self) -> np.ndarray:
        """Copy of the nominal contents in the histogram's N-d shape."""
        return self._contents.reshape(self.shape).copy()

    def __repr__(self) -> str:
        return f"<BinnedHistogram {self.name}: axes={[a.name for a in self.axes]}, shape={self.shape}>"
