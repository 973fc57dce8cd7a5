"""Lua bundling: require discovery and single-chunk rendering."""

from .bundle import BundledModule
from .bundle import Bundler
from .bundle import BundleResult
from .bundle import bundle
from .requires import RequireCall
from .requires import find_requires
from .runtime import ROOT_MODULE_NAME

__all__ = [
    "BundleResult",
    "BundledModule",
    "Bundler",
    "ROOT_MODULE_NAME",
    "RequireCall",
    "bundle",
    "find_requires",
]
