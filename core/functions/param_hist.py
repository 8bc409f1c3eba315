# core/functions/param_hist.py
"""
Histogram function with one scale parameter per bin.

Instead of the bare bin contents the function yields gamma_i (absolute mode)
or gamma_i * nominal_i (relative mode) for the bin i holding the current
observable values. Together with a constraint term on the gamma_i this
parametrizes the statistical uncertainty of a histogram template
(Barlow-Beeston).
"""
from __future__ import annotations

from typing import Callable, Iterable, Iterator, Optional, Union

from core.binning.axis import Observable, ObservableSet
from core.binning.histogram import BinnedHistogram
from core.exceptions import HistFuncError, IntegrationError
from core.functions.base import RealFunction, variable_names
from core.parameters.store import ParameterStore
from utils.logging_config import get_logger

logger = get_logger(__name__)


class _Hint:
    """Restartable lazy sequence over a generator function."""

    def __init__(self, make: Callable[[], Iterator[float]]):
        self._make = make

    def __iter__(self) -> Iterator[float]:
        return self._make()

    def __repr__(self) -> str:
        return f"<hint {list(self)}>"


_EMPTY = _Hint(lambda: iter(()))


class ParamHistFunc(RealFunction):
    type_name = "param_hist"

    def __init__(self, name: str, histogram: BinnedHistogram, relative: bool = True,
                 parameters_from: Optional["ParamHistFunc"] = None):
        """
        Args:
            name: Function name; also the prefix of freshly created parameters.
            histogram: Template providing binning and nominal contents.
            relative: Parameters scale the nominal contents when True, and
                replace them when False. Fixed for the lifetime of the function.
            parameters_from: Share this function's parameter store instead of
                creating one. The store is referenced, not copied.
        """
        super().__init__(name)
        self._hist = histogram
        self._relative = bool(relative)
        if parameters_from is None:
            self._params = ParameterStore.from_histogram(histogram, name, self._relative)
        else:
            donor = parameters_from.parameters
            if len(donor) != histogram.num_entries:
                raise HistFuncError(
                    f"Cannot share parameters of '{parameters_from.name}' with '{name}': "
                    f"{len(donor)} parameters for {histogram.num_entries} bins"
                )
            self._params = donor
        logger.debug("Created %r with %d bin parameters", self, len(self._params))

    def clone(self, name: Optional[str] = None) -> "ParamHistFunc":
        """Copy sharing the histogram and the parameter store."""
        return ParamHistFunc(name or self.name, self._hist, self._relative, parameters_from=self)

    @property
    def observables(self) -> ObservableSet:
        return self._hist.observables

    @property
    def histogram(self) -> BinnedHistogram:
        return self._hist

    @property
    def parameters(self) -> ParameterStore:
        return self._params

    @property
    def relative(self) -> bool:
        return self._relative

    def evaluate(self, values=None) -> float:
        idx = self._hist.resolve(values)
        ret = self._params.get(idx)
        if self._relative:
            ret *= self.get_nominal(idx)
        return ret

    def get_actual(self, ibin: int) -> float:
        return self._params.get(ibin)

    def set_actual(self, ibin: int, value: float) -> None:
        self._params.set(ibin, value)

    def get_nominal(self, ibin: int) -> float:
        return self._hist.nominal_content(ibin)

    def get_nominal_error(self, ibin: int) -> float:
        return self._hist.nominal_error(ibin)

    def is_constant(self, ibin: int) -> bool:
        return self._params.is_constant(ibin)

    def set_constant(self, ibin: int, constant: bool = True) -> None:
        self._params.set_constant(ibin, constant)

    def _observable_boundaries(self, observable: Union[str, Observable]):
        name = observable if isinstance(observable, str) else observable.name
        if name not in self.observables:
            return None
        return self._hist.boundaries(name)

    def plot_sampling_hint(self, observable: Union[str, Observable],
                           lo: float, hi: float) -> Iterable[float]:
        """
        Pairs of points just left and right of every bin boundary in a
        slightly widened [lo, hi], so that a curve sampler renders the steps
        as vertical jumps instead of smoothing over them.
        """
        boundaries = self._observable_boundaries(observable)
        if boundaries is None:
            return _EMPTY

        # Widen range slightly
        lo = lo - 0.01 * (hi - lo)
        hi = hi + 0.01 * (hi - lo)
        delta = (hi - lo) * 1e-8

        def points() -> Iterator[float]:
            for b in boundaries:
                if lo <= b <= hi:
                    yield float(b) - delta
                    yield float(b) + delta

        return _Hint(points)

    def bin_boundaries(self, observable: Union[str, Observable],
                       lo: float, hi: float) -> Iterable[float]:
        boundaries = self._observable_boundaries(observable)
        if boundaries is None:
            return _EMPTY
        return _Hint(lambda: (float(b) for b in boundaries if lo <= b <= hi))

    def analytic_integral_code(self, variables) -> int:
        # Only the integral over all observables at once is supported
        if variable_names(variables) == set(self.observables.names):
            return 1
        return 0

    def analytic_integral(self, code: int) -> float:
        """
        Sum of all bin values times the bin volume. The bin volume is taken
        as the product of (max - min) / num_bins over the axes, which is only
        exact for uniform binning.
        """
        if code != 1:
            raise IntegrationError(f"Unsupported integral code {code} for '{self.name}'")

        total = 0.0
        for i, param in enumerate(self._params):
            val = param.value
            if self._relative:
                val *= self.get_nominal(i)
            total += val

        # TODO: use per-bin volumes so that non-uniform binning integrates correctly
        bin_volume = 1.0
        for axis in self._hist.axes:
            if not axis.is_uniform:
                logger.debug("Axis '%s' of '%s' is not uniform; integral assumes uniform bins",
                             axis.name, self.name)
            bin_volume *= (axis.max - axis.min) / axis.num_bins

        return total * bin_volume
