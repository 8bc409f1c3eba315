# core/functions/base.py
"""
Base real-valued function API for histfunc.
Defines the interface an optimizer, integrator or plotter relies on.
"""
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Union

from core.binning.axis import Observable, ObservableSet
from core.exceptions import IntegrationError


class RealFunction(ABC):
    """
    Abstract base class for real-valued functions of a set of observables.
    Subclasses must define `observables` and evaluate().
    """
    type_name: str = "undefined"  # Override in subclasses

    def __init__(self, name: str):
        self.name = name

    @property
    @abstractmethod
    def observables(self) -> ObservableSet:
        """Ordered observables the function is defined over."""
        pass

    @abstractmethod
    def evaluate(self, values=None) -> float:
        """
        Evaluate at `values` (mapping by observable name or sequence in
        observable order), or at the current observable values if None.
        """
        pass

    def __call__(self, values=None) -> float:
        return self.evaluate(values)

    def analytic_integral_code(self, variables: Iterable[Union[str, Observable]]) -> int:
        """
        Return a non-zero code if the integral over `variables` can be
        computed in closed form, 0 otherwise.
        """
        return 0

    def analytic_integral(self, code: int) -> float:
        raise IntegrationError(f"{self.type_name} '{self.name}' has no analytic integral (code {code})")

    def plot_sampling_hint(self, observable: Union[str, Observable],
                           lo: float, hi: float) -> Iterable[float]:
        """Extra points a curve sampler should evaluate within [lo, hi]."""
        return ()

    def bin_boundaries(self, observable: Union[str, Observable],
                       lo: float, hi: float) -> Iterable[float]:
        """Discontinuities of the function within [lo, hi]."""
        return ()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} ({self.type_name})>"


def variable_names(variables: Optional[Iterable[Union[str, Observable]]]) -> set:
    """Normalize a collection of names or observables to a set of names."""
    if variables is None:
        return set()
    if isinstance(variables, (str, Observable)):
        variables = [variables]
    return {v if isinstance(v, str) else v.name for v in variables}
