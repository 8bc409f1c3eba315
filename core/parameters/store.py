# core/parameters/store.py
"""
Bin-indexed parameter store.

One Parameter per histogram bin, in bin-index order. The store never grows
or shrinks after construction. A store can be referenced by several
functions at once; there is no locking, so writes through any of them are
immediately visible to all and concurrent writers must synchronize
themselves.
"""
from __future__ import annotations

import math
from typing import Iterator, List, Sequence, Union

import numpy as np

from core.exceptions import DegenerateBinWarning, OutOfRangeError
from core.parameters.parameter import Parameter
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Initial guess window of every bin parameter.
PARAM_MIN = 0.0
PARAM_MAX = 1000.0


class ParameterStore:
    def __init__(self, parameters: Sequence[Parameter]):
        self._params: List[Parameter] = list(parameters)
        self._index = {p.name: i for i, p in enumerate(self._params)}
        self.degenerate_bins: List[int] = []

    @classmethod
    def from_histogram(cls, hist, prefix: str, relative: bool) -> "ParameterStore":
        """
        Create one parameter per bin of `hist`, named "<prefix>_gamma_bin_<i>".

        Relative mode seeds value 1 and error 1/sqrt(nominal); absolute mode
        seeds the nominal content and sqrt(nominal). Bins whose seed error
        would be undefined get math.inf and are listed in `degenerate_bins`.
        """
        params = []
        degenerate = []
        for i in range(hist.num_entries):
            nominal = hist.nominal_content(i)
            value = 1.0 if relative else nominal
            if nominal > 0:
                error = 1.0 / math.sqrt(nominal) if relative else math.sqrt(nominal)
            elif nominal == 0 and not relative:
                error = 0.0
            else:
                error = math.inf
                degenerate.append(i)
            params.append(Parameter(f"{prefix}_gamma_bin_{i}", value, error, PARAM_MIN, PARAM_MAX))

        store = cls(params)
        store.degenerate_bins = degenerate
        if degenerate:
            logger.warning(
                "%s: bins %s of '%s' have nominal content <= 0; uncertainty seed set to inf",
                DegenerateBinWarning.__name__, degenerate, hist.name,
            )
        return store

    def _check(self, ibin: int) -> int:
        if isinstance(ibin, bool) or not isinstance(ibin, (int, np.integer)) \
                or not 0 <= ibin < len(self._params):
            raise OutOfRangeError(f"Bin {ibin} not in [0, {len(self._params)})")
        return ibin

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._params)

    def __getitem__(self, key: Union[int, str]) -> Parameter:
        if isinstance(key, str):
            try:
                return self._params[self._index[key]]
            except KeyError:
                raise OutOfRangeError(f"No parameter named '{key}'")
        return self._params[self._check(key)]

    def get(self, ibin: int) -> float:
        return self._params[self._check(ibin)].value

    def set(self, ibin: int, value: float) -> None:
        self._params[self._check(ibin)].value = float(value)

    def is_constant(self, ibin: int) -> bool:
        return self._params[self._check(ibin)].constant

    def set_constant(self, ibin: int, constant: bool = True) -> None:
        self._params[self._check(ibin)].constant = bool(constant)

    def fix_all(self) -> None:
        for p in self._params:
            p.constant = True

    def float_all(self) -> None:
        for p in self._params:
            p.constant = False

    def free_parameters(self) -> List[Parameter]:
        return [p for p in self._params if not p.constant]

    def names(self) -> List[str]:
        return [p.name for p in self._params]

    def values(self) -> np.ndarray:
        return np.fromiter((p.value for p in self._params), dtype=float, count=len(self._params))

    def __repr__(self) -> str:
        n_free = len(self.free_parameters())
        return f"<ParameterStore {len(self)} parameters, {n_free} floating>"
