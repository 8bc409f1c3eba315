import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import numpy as np

from core.exceptions import HistFuncError
from core.functions.base import RealFunction
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ScanResult:
    function: str
    observable: str
    x: np.ndarray
    values: np.ndarray
    errors: List[str] = field(default_factory=list)
    stats: Dict[str, float] = field(default_factory=dict)

    @property
    def valid(self) -> np.ndarray:
        """Mask of points that evaluated successfully."""
        return ~np.isnan(self.values)

    def to_dataframe(self):
        import pandas as pd
        return pd.DataFrame({
            "function": self.function,
            self.observable: self.x,
            "value": self.values,
        })


def scan(func: RealFunction, observable: str, lo: Optional[float] = None, hi: Optional[float] = None,
         points: int = 100, hints: bool = True, fixed: Optional[Mapping[str, float]] = None) -> ScanResult:
    """
    Evaluate `func` along one observable, the others held at `fixed` or at
    their current values.

    The grid is `points` evenly spaced values in [lo, hi] (default: the
    observable's range), merged with the function's sampling hint when
    `hints` is set. Points that fail to evaluate are recorded as NaN with an
    entry in `errors` instead of aborting the scan.
    """
    obs = func.observables[observable]
    lo = obs.min if lo is None else float(lo)
    hi = obs.max if hi is None else float(hi)
    if not hi > lo:
        raise HistFuncError(f"Scan range [{lo}, {hi}] of '{observable}' is empty")

    grid = np.linspace(lo, hi, points)
    n_hints = 0
    if hints:
        extra = np.fromiter(func.plot_sampling_hint(observable, lo, hi), dtype=float)
        # Hints come from a widened range; keep only those inside the requested one
        extra = extra[(extra >= lo) & (extra <= hi)]
        n_hints = extra.size
        grid = np.union1d(grid, extra)

    base = dict(fixed or {})
    values = np.full(grid.shape, np.nan)
    errors: List[str] = []
    start_time = time.time()
    for k, x in enumerate(grid):
        try:
            values[k] = func.evaluate({**base, observable: float(x)})
        except HistFuncError as e:
            logger.debug("Scan of '%s' at %s=%g failed: %s", func.name, observable, x, e)
            errors.append(f"{observable}={x:.6g}: {e}")

    elapsed = time.time() - start_time
    stats = {"points": int(grid.size), "hints": n_hints, "failed": len(errors), "elapsed": elapsed}
    return ScanResult(func.name, observable, grid, values, errors, stats)
