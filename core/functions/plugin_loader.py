# core/functions/plugin_loader.py
"""
Plugin loader for histfunc function types.
Registers built-in core.functions modules and discovers third-party plugins
via the 'histfunc.functions' entry point group.
"""
from importlib.metadata import entry_points
from typing import Any, Dict, Type

from core.binning.histogram import BinnedHistogram
from core.exceptions import HistFuncError
from core.functions.base import RealFunction
from core.functions.param_hist import ParamHistFunc
from utils.logging_config import get_logger

logger = get_logger(__name__)

ENTRY_POINT_GROUP = "histfunc.functions"


class FunctionFactory:
    """
    Factory for creating function instances by type name.
    """
    _registry: Dict[str, Type[RealFunction]] = {
        ParamHistFunc.type_name: ParamHistFunc,
    }
    _loaded: bool = False

    @classmethod
    def load_plugins(cls) -> None:
        """Discover entry point plugins once; broken plugins are skipped with a warning."""
        if cls._loaded:
            return
        cls._loaded = True

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                func_cls = ep.load()
            except Exception as e:
                logger.warning("Skipping plugin '%s': %s", ep.name, e)
                continue
            if not (isinstance(func_cls, type) and issubclass(func_cls, RealFunction)):
                logger.warning("Skipping plugin '%s': not a RealFunction subclass", ep.name)
                continue
            type_name = getattr(func_cls, 'type_name', None)
            if not isinstance(type_name, str):
                continue
            cls._registry[type_name.lower()] = func_cls

    @classmethod
    def register(cls, func_cls: Type[RealFunction]) -> None:
        """
        Manually register a function class.
        The class must define a unique `type_name` attribute.
        """
        if not (isinstance(func_cls, type) and issubclass(func_cls, RealFunction)):
            raise HistFuncError(f"Cannot register non-RealFunction class: {func_cls}")
        type_name = getattr(func_cls, 'type_name', None)
        if not isinstance(type_name, str) or type_name == RealFunction.type_name:
            raise HistFuncError(f"Function class {func_cls} lacks a valid `type_name` attribute.")
        cls._registry[type_name.lower()] = func_cls

    @classmethod
    def available(cls) -> list:
        cls.load_plugins()
        return sorted(cls._registry)

    @classmethod
    def create(cls, type_name: str, name: str, histogram: BinnedHistogram, **options: Any) -> RealFunction:
        """
        Instantiate a function by its type name (case-insensitive).
        Raises HistFuncError for unknown types or instantiation errors.
        """
        cls.load_plugins()
        func_cls = cls._registry.get(type_name.lower())
        if func_cls is None:
            raise HistFuncError(f"Unknown function type: '{type_name}'")
        try:
            return func_cls(name, histogram, **options)
        except HistFuncError:
            raise
        except Exception as e:
            raise HistFuncError(f"Error instantiating function '{name}' of type '{type_name}': {e}")
