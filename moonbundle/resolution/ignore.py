"""Ignore filter for modules provided by the runtime host.

MoonLoader registers its own loaders for modules such as ``lib.moonloader``
or ``ffi``. References to those names are left untouched in the bundle and
satisfied by the host's ``require`` at run time.
"""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ModuleIgnoreFilter:
    """Exact-name membership test against a fixed set of module names.

    Contract:
    - Inputs: module names known at configuration time
    - Outputs: is_ignored(name) -> bool
    - Side effects: None (pure after initialization)
    """

    def __init__(self, module_names: Iterable[str]) -> None:
        self.module_names = frozenset(module_names)
        if self.module_names:
            logger.debug(f"ModuleIgnoreFilter initialized with {len(self.module_names)} modules")

    def is_ignored(self, module_name: str) -> bool:
        return module_name in self.module_names

    def __contains__(self, module_name: str) -> bool:
        return self.is_ignored(module_name)

    def __repr__(self) -> str:
        return f"ModuleIgnoreFilter(modules={sorted(self.module_names)})"
