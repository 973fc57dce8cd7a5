"""Module resolver used as the bundler's resolution callback.

Resolution order (first decision wins):
1. Ignore set - module is left for the runtime host, no filesystem access
2. Path patterns - first existing regular file
3. Missing - nothing matched
"""

import logging

from ..config import BundleConfig
from .ignore import ModuleIgnoreFilter
from .patterns import PathPatternResolver

logger = logging.getLogger(__name__)

LAYER_IGNORED = "ignored"
LAYER_PATTERN = "pattern"
LAYER_MISSING = "missing"


class ModuleResolver:
    """Compose the ignore filter and the path-pattern search."""

    def __init__(self, ignore_filter: ModuleIgnoreFilter, path_resolver: PathPatternResolver) -> None:
        self.ignore_filter = ignore_filter
        self.path_resolver = path_resolver

    @classmethod
    def from_config(cls, config: BundleConfig) -> "ModuleResolver":
        """Build the resolver described by a bundle configuration."""
        return cls(ModuleIgnoreFilter(config.ignored_modules), PathPatternResolver(config.paths))

    def is_ignored(self, module_name: str) -> bool:
        return self.ignore_filter.is_ignored(module_name)

    def resolve(self, module_name: str) -> str | None:
        """Resolve a module name to a file path, None when ignored or missing."""
        path, _layer = self.resolve_with_layer(module_name)
        return path

    def resolve_with_layer(self, module_name: str) -> tuple[str | None, str]:
        """Resolve module and return which layer decided.

        Returns:
            Tuple of (path or None, layer_name)
            layer_name is one of: ignored, pattern, missing
        """
        if self.ignore_filter.is_ignored(module_name):
            logger.debug(f"[module:resolve] {module_name} -> ignored (runtime host)")
            return (None, LAYER_IGNORED)

        if path := self.path_resolver.resolve(module_name):
            return (path, LAYER_PATTERN)

        return (None, LAYER_MISSING)

    def candidates(self, module_name: str) -> list[str]:
        return self.path_resolver.candidates(module_name)

    def __repr__(self) -> str:
        return f"ModuleResolver({self.ignore_filter!r}, {self.path_resolver!r})"
