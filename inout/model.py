# inout/model.py
"""
Load and validate YAML model files into a Workspace of histograms and functions.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from cerberus import Validator

from core.binning.axis import Axis
from core.binning.histogram import BinnedHistogram
from core.exceptions import ConfigError, HistFuncError
from core.functions.base import RealFunction
from core.functions.plugin_loader import FunctionFactory
from core.parameters.resolver import resolve as resolve_expressions
from utils.logging_config import get_logger

logger = get_logger(__name__)

_NUMBER_LIST = {"type": "list", "minlength": 1, "schema": {"type": "number"}}

MODEL_SCHEMA: Dict[str, Any] = {
    "constants": {
        "type": "dict", "required": False,
        "keysrules": {"type": "string", "regex": r"^[A-Za-z_]\w*$"},
        "valuesrules": {"type": ["string", "number"]},
    },

    "histograms": {
        "type": "list", "required": True, "minlength": 1,
        "schema": {
            "type": "dict", "schema": {
                "name": {"type": "string", "required": True},
                "axes": {
                    "type": "list", "required": True, "minlength": 1,
                    "schema": {
                        "type": "dict", "schema": {
                            "name":  {"type": "string", "required": True},
                            "bins":  {"type": "integer", "min": 1, "excludes": "edges", "dependencies": "range"},
                            "range": {"type": "list", "minlength": 2, "maxlength": 2,
                                      "schema": {"type": "number"}, "excludes": "edges"},
                            "edges": {"type": "list", "minlength": 2, "schema": {"type": "number"},
                                      "excludes": ["bins", "range"]},
                        },
                    },
                },
                "contents": {**_NUMBER_LIST, "required": True},
                "errors":   {**_NUMBER_LIST, "required": False},
            },
        },
    },

    "functions": {
        "type": "list", "required": False,
        "schema": {
            "type": "dict", "schema": {
                "name":            {"type": "string", "required": True},
                "type":            {"type": "string", "required": False, "default": "param_hist"},
                "histogram":       {"type": "string", "required": True},
                "relative":        {"type": "boolean", "required": False, "default": True},
                "parameters_from": {"type": "string", "required": False},
                "float":           {"type": ["boolean", "list"], "required": False,
                                    "schema": {"type": "integer", "min": 0}},
                "values":          {"type": "dict", "required": False,
                                    "keysrules": {"type": "integer", "min": 0},
                                    "valuesrules": {"type": ["string", "number"]}},
            },
        },
    },
}


@dataclass
class Workspace:
    constants: Dict[str, float] = field(default_factory=dict)
    histograms: Dict[str, BinnedHistogram] = field(default_factory=dict)
    functions: Dict[str, RealFunction] = field(default_factory=dict)

    def function(self, name: str) -> RealFunction:
        try:
            return self.functions[name]
        except KeyError:
            raise ConfigError(f"No function named '{name}' in workspace")


def _ensure_unique(seq: List[str], kind: str) -> None:
    """Raise *once* if duplicates found in *seq*."""
    dup = {x for x in seq if seq.count(x) > 1}
    if dup:
        raise ConfigError(f"Duplicate {kind}: {', '.join(sorted(dup))}")


def _build_axis(adoc: Dict[str, Any]) -> Axis:
    if "edges" in adoc:
        return Axis(adoc["name"], adoc["edges"])
    if "bins" not in adoc or "range" not in adoc:
        raise ConfigError(f"Axis '{adoc['name']}' needs either 'edges' or 'bins' and 'range'")
    lo, hi = adoc["range"]
    return Axis.uniform(adoc["name"], adoc["bins"], lo, hi)


def _build_histogram(hdoc: Dict[str, Any]) -> BinnedHistogram:
    axes = [_build_axis(a) for a in hdoc["axes"]]
    return BinnedHistogram(hdoc["name"], axes, hdoc["contents"], hdoc.get("errors"))


def _apply_settings(func: RealFunction, fdoc: Dict[str, Any], constants: Dict[str, float]) -> None:
    params = getattr(func, "parameters", None)
    if params is None:
        if "values" in fdoc or "float" in fdoc:
            raise ConfigError(f"Function '{func.name}' has no bin parameters to configure")
        return

    exprs = {f"bin_{k}": v for k, v in (fdoc.get("values") or {}).items()}
    for key, value in resolve_expressions(exprs, constants).items():
        params.set(int(key[len("bin_"):]), value)

    floating = fdoc.get("float")
    if floating is True:
        params.float_all()
    elif isinstance(floating, list):
        for ibin in floating:
            params.set_constant(ibin, False)


def load_model(path: Union[str, Path]) -> Workspace:
    """
    Read, validate and instantiate a model file.

    Raises:
        ConfigError: If the file cannot be read, violates the schema or
            references unknown histograms or functions.
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read YAML '{path}': {exc}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Model file '{path}' must contain a mapping at top level")
    v = Validator(MODEL_SCHEMA, allow_unknown=False)
    if not v.validate(raw):
        raise ConfigError(f"Model schema violations: {v.errors}")
    doc = v.document

    _ensure_unique([h["name"] for h in doc["histograms"]], "histogram names")
    _ensure_unique([f["name"] for f in doc.get("functions", [])], "function names")

    ws = Workspace()
    try:
        ws.constants = resolve_expressions(doc.get("constants") or {})
    except HistFuncError as exc:
        raise ConfigError(f"Cannot resolve constants: {exc}")

    for hdoc in doc["histograms"]:
        try:
            ws.histograms[hdoc["name"]] = _build_histogram(hdoc)
        except HistFuncError as exc:
            raise ConfigError(f"Invalid histogram '{hdoc['name']}': {exc}")

    for fdoc in doc.get("functions", []):
        name = fdoc["name"]
        hist = ws.histograms.get(fdoc["histogram"])
        if hist is None:
            raise ConfigError(f"Function '{name}' refers to unknown histogram '{fdoc['histogram']}'")
        options: Dict[str, Any] = {"relative": fdoc["relative"]}
        if "parameters_from" in fdoc:
            donor = ws.functions.get(fdoc["parameters_from"])
            if donor is None:
                raise ConfigError(
                    f"Function '{name}' shares parameters with unknown or later function "
                    f"'{fdoc['parameters_from']}'"
                )
            options["parameters_from"] = donor
        try:
            func = FunctionFactory.create(fdoc["type"], name, hist, **options)
            _apply_settings(func, fdoc, ws.constants)
        except HistFuncError as exc:
            raise ConfigError(f"Cannot build function '{name}': {exc}")
        ws.functions[name] = func
        logger.info("Loaded function '%s' (%s) on histogram '%s'", name, func.type_name, hist.name)

    return ws
