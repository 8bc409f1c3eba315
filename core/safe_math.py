# core/safe_math.py
import sympy as sp

_ALLOWED_FUNCS = {
    # scalars
    "sin": sp.sin, "cos": sp.cos, "tan": sp.tan, "exp": sp.exp,
    "log": sp.log, "sqrt": sp.sqrt, "abs": sp.Abs,
    "min": sp.Min, "max": sp.Max,
    # constants
    "pi": sp.pi, "e": sp.E,
}

def parse_expr(src: str) -> sp.Expr:
    """Parse *pure* maths, nothing else."""
    try:
        return sp.sympify(src, locals=_ALLOWED_FUNCS, convert_xor=True)
    except (sp.SympifyError, SyntaxError, TypeError) as exc:
        raise ValueError(f"Bad expression '{src}': {exc}") from exc
