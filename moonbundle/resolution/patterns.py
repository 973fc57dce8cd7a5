"""Path-pattern module resolution.

Lua locates modules by substituting the module name into each entry of
``package.path`` ("?.lua", "src/?/init.lua", ...) and loading the first file
that exists. PathPatternResolver performs the same search at build time.
"""

import logging
import os
import stat
from collections.abc import Callable
from collections.abc import Sequence

from ..config import PATH_PLACEHOLDER

logger = logging.getLogger(__name__)

MODULE_SEPARATOR = "."


def module_path_fragment(module_name: str, sep: str = os.sep) -> str:
    """Convert a dotted module name to a relative path fragment.

    Example:
        >>> module_path_fragment("lib.samp.events", "/")
        'lib/samp/events'
    """
    return module_name.replace(MODULE_SEPARATOR, sep)


def is_regular_file(path: str) -> bool:
    """Check the path itself (not a symlink target) is a regular file."""
    try:
        return stat.S_ISREG(os.lstat(path).st_mode)
    except OSError:
        return False


class PathPatternResolver:
    """Resolve module names against an ordered list of path patterns.

    The first pattern (in declared order) whose substitution names an
    existing regular file wins. The candidate path string is returned exactly
    as built, without normalisation.

    Args:
        patterns: Templates containing the '?' placeholder
        is_file: Existence check, defaults to an lstat regular-file test
        sep: Separator used in place of '.' in module names
    """

    def __init__(
        self,
        patterns: Sequence[str],
        is_file: Callable[[str], bool] | None = None,
        sep: str = os.sep,
    ) -> None:
        self.patterns = list(patterns)
        self.is_file = is_file or is_regular_file
        self.sep = sep

    def candidates(self, module_name: str) -> list[str]:
        """Candidate file paths for a module, in pattern order."""
        fragment = module_path_fragment(module_name, self.sep)
        return [pattern.replace(PATH_PLACEHOLDER, fragment) for pattern in self.patterns]

    def resolve(self, module_name: str) -> str | None:
        """Return the first existing candidate path, or None."""
        if not module_name:
            return None

        for candidate in self.candidates(module_name):
            if self.is_file(candidate):
                logger.debug(f"[module:resolve] {module_name} -> {candidate}")
                return candidate

        logger.debug(f"[module:resolve] {module_name} -> not found")
        return None

    def __repr__(self) -> str:
        return f"PathPatternResolver(patterns={self.patterns})"
