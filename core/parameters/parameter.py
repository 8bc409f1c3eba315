# core/parameters/parameter.py
from dataclasses import dataclass


@dataclass
class Parameter:
    """
    A scalar fit parameter.

    Attributes:
        name: Unique name, e.g. "sig_gamma_bin_3".
        value: Current value. Never clamped to [min, max].
        error: Uncertainty estimate; math.inf marks a degenerate seed.
        min: Lower edge of the initial guess window.
        max: Upper edge of the initial guess window.
        constant: Held fixed when True; an optimizer floats it by clearing this.
    """
    name: str
    value: float
    error: float = 0.0
    min: float = 0.0
    max: float = 1000.0
    constant: bool = True

    def in_range(self) -> bool:
        return self.min <= self.value <= self.max
