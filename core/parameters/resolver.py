"""
Expression resolver for histfunc.
Resolves named numeric expressions (bin values, model constants) into floats,
honoring inter-expression dependencies using sympy and networkx.
"""

from typing import Dict, Mapping, Optional, Union
import networkx as nx
import sympy as sp

from core.exceptions import ParameterError
from core.safe_math import parse_expr

Expression = Union[str, int, float, sp.Expr]


def _to_expr(key: str, expr: Expression) -> Union[float, sp.Expr]:
    """Turn a raw value into a float or a parsed sympy expression."""
    if isinstance(expr, bool):
        raise ParameterError(f"Unsupported type for '{key}': bool")
    if isinstance(expr, (int, float)):
        return float(expr)
    if isinstance(expr, str):
        try:
            parsed = parse_expr(expr)
        except ValueError as e:
            raise ParameterError(f"Failed to parse expression for '{key}': {e}")
        if not isinstance(parsed, sp.Expr):
            raise ParameterError(f"Expression for '{key}' is not numeric: {expr!r}")
        return parsed
    if isinstance(expr, sp.Expr):
        return expr
    raise ParameterError(f"Unsupported type for '{key}': {type(expr)}")


def _build_dependency_graph(parsed: Mapping[str, Union[float, sp.Expr]]) -> nx.DiGraph:
    """
    Build a directed graph with an edge dep -> key for every name `key`
    whose expression references another name `dep` in the same mapping.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(parsed)
    for key, expr in parsed.items():
        if not isinstance(expr, sp.Expr):
            continue
        for sym in expr.free_symbols:
            name = str(sym)
            if name == key:
                raise ParameterError(f"Expression for '{key}' references itself")
            if name in parsed:
                graph.add_edge(name, key)
    return graph


def resolve(param_dict: Mapping[str, Expression],
            context: Optional[Mapping[str, float]] = None) -> Dict[str, float]:
    """
    Resolve all entries in `param_dict` to numeric float values.

    Args:
        param_dict: Mapping from name to number, expression string or sympy.Expr.
        context: Already-resolved values that expressions may reference but
            which are not part of the result.

    Returns:
        Dictionary mapping each name in `param_dict` to its float value.

    Raises:
        ParameterError: If parsing fails, a dependency is circular, or a
            symbol is left unresolved.
    """
    parsed = {key: _to_expr(key, expr) for key, expr in param_dict.items()}
    graph = _build_dependency_graph(parsed)
    try:
        order = list(nx.topological_sort(graph))
    except nx.NetworkXUnfeasible:
        cycle = [edge[0] for edge in nx.find_cycle(graph)]
        raise ParameterError(f"Circular dependency among: {', '.join(cycle)}")

    known: Dict[str, float] = dict(context or {})
    resolved: Dict[str, float] = {}
    for key in order:
        expr = parsed[key]
        if isinstance(expr, float):
            value = expr
        else:
            missing = sorted(str(s) for s in expr.free_symbols if str(s) not in known)
            if missing:
                raise ParameterError(f"Unresolved symbols in '{key}': {', '.join(missing)}")
            try:
                value = complex(expr.evalf(subs={sp.Symbol(k): v for k, v in known.items()}))
            except (TypeError, ValueError) as e:
                raise ParameterError(f"Evaluation failed for '{key}': {e}")
            if value.imag != 0:
                raise ParameterError(f"Expression for '{key}' is not real: {value}")
            value = value.real
        known[key] = value
        resolved[key] = value

    return resolved
