# evaluation/integration.py
"""
Integration of real functions over (a subset of) their observables.

Functions are asked for an analytic integral first; when they decline
(code 0), the integral is computed numerically with scipy at the current or
given values of the observables that are not integrated over.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

from scipy import integrate as sci_integrate

from core.binning.axis import Observable
from core.exceptions import IntegrationError
from core.functions.base import RealFunction, variable_names
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Subdivision limit of the adaptive quadrature, before adding break points.
QUAD_LIMIT = 50


@dataclass
class IntegralResult:
    value: float
    code: int
    analytic: bool
    variables: List[str]
    abserr: float = 0.0


def _quad_opts(func: RealFunction, name: str, lo: float, hi: float) -> Dict[str, object]:
    points = [b for b in func.bin_boundaries(name, lo, hi) if lo < b < hi]
    opts: Dict[str, object] = {"limit": QUAD_LIMIT + 2 * len(points)}
    if points:
        opts["points"] = points
    return opts


def integrate(func: RealFunction,
              variables: Optional[Iterable[Union[str, Observable]]] = None,
              values: Optional[Mapping[str, float]] = None) -> IntegralResult:
    """
    Integrate `func` over the full range of `variables` (default: all observables).

    Args:
        func: Function to integrate.
        variables: Observables (or their names) to integrate over.
        values: Coordinates of the remaining observables; current observable
            values are used for any that are missing.

    Raises:
        IntegrationError: For unknown variables or a failing numeric integration.
    """
    all_names = func.observables.names
    requested = variable_names(variables) if variables is not None else set(all_names)
    unknown = requested - set(all_names)
    if unknown:
        raise IntegrationError(f"'{func.name}' does not depend on {', '.join(sorted(unknown))}")
    if not requested:
        raise IntegrationError("No integration variables given")
    names = [n for n in all_names if n in requested]

    code = func.analytic_integral_code(names)
    if code:
        value = func.analytic_integral(code)
        logger.debug("Analytic integral of '%s' over %s (code %d) = %g", func.name, names, code, value)
        return IntegralResult(value, code, True, names)

    fixed = {o.name: o.value for o in func.observables if o.name not in requested}
    fixed.update({k: float(v) for k, v in (values or {}).items() if k not in requested})

    def integrand(*xs: float) -> float:
        return func.evaluate({**fixed, **dict(zip(names, xs))})

    ranges = [(func.observables[n].min, func.observables[n].max) for n in names]
    opts = [_quad_opts(func, n, lo, hi) for n, (lo, hi) in zip(names, ranges)]
    logger.debug("Numeric integral of '%s' over %s at %s", func.name, names, fixed)
    try:
        if len(names) == 1:
            (lo, hi), = ranges
            value, abserr = sci_integrate.quad(integrand, lo, hi, **opts[0])
        else:
            value, abserr = sci_integrate.nquad(integrand, ranges, opts=opts)
    except IntegrationError:
        raise
    except Exception as e:
        raise IntegrationError(f"Numeric integration of '{func.name}' over {names} failed: {e}")

    return IntegralResult(float(value), 0, False, names, float(abserr))
