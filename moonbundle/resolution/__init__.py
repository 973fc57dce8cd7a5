"""Module resolution: ignore set plus ordered path-pattern search."""

from .ignore import ModuleIgnoreFilter
from .patterns import PathPatternResolver
from .patterns import is_regular_file
from .patterns import module_path_fragment
from .resolvers import ModuleResolver

__all__ = [
    "ModuleIgnoreFilter",
    "ModuleResolver",
    "PathPatternResolver",
    "is_regular_file",
    "module_path_fragment",
]
