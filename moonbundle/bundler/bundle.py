"""Bundle driver.

Walks the require graph from an entry script and renders every reachable,
non-ignored module into a single Lua chunk.

Traversal is depth-first in source order. A module is registered the first
time its name is seen, so cycles terminate and the output order is stable
across runs with unchanged sources.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .. import __version__
from ..config import BundleConfig
from ..config import LuaVersion
from ..errors import NonLiteralRequireError
from ..errors import UnresolvedModuleError
from ..resolution import ModuleResolver
from ..resolution.resolvers import LAYER_IGNORED
from ..resolution.resolvers import LAYER_MISSING
from .requires import RequireCall
from .requires import find_requires
from .runtime import ROOT_MODULE_NAME
from .runtime import render_footer
from .runtime import render_metadata
from .runtime import render_module
from .runtime import render_prelude

logger = logging.getLogger(__name__)

# (requiring module name, argument expression) -> module name(s) to bundle, or None to skip
ExpressionHandler = Callable[[str, str], str | list[str] | None]


@dataclass
class BundledModule:
    """A module inlined into the bundle."""

    name: str
    path: str
    content: str
    requires: list[str] = field(default_factory=list)


@dataclass
class BundleResult:
    """Output of a successful bundling run.

    Attributes:
        content: The complete bundled Lua chunk
        modules: Inlined modules, root first, in registration order
        ignored: Ignored module names referenced by any bundled module (sorted)
    """

    content: str
    modules: list[BundledModule]
    ignored: list[str]

    @property
    def module_names(self) -> list[str]:
        return [module.name for module in self.modules]


def strip_shebang(source: str) -> str:
    """Drop a leading '#' line, which is only legal at the top of a file chunk."""
    if not source.startswith("#"):
        return source
    newline = source.find("\n")
    return "" if newline == -1 else source[newline:]


class Bundler:
    """Bundle an entry script and its local dependencies.

    Args:
        resolver: Ignore set plus path-pattern search
        lua_version: Dialect used to recognise require calls
        isolate: When False the host require handles unregistered names at run time
        metadata: Emit the '-- Bundled by' header
        expression_handler: Decides what to bundle for non-literal requires
        encoding: Text encoding of sources and output
    """

    def __init__(
        self,
        resolver: ModuleResolver,
        lua_version: LuaVersion = LuaVersion.LUAJIT,
        isolate: bool = False,
        metadata: bool = True,
        expression_handler: ExpressionHandler | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self.resolver = resolver
        self.lua_version = lua_version
        self.isolate = isolate
        self.metadata = metadata
        self.expression_handler = expression_handler
        self.encoding = encoding

    @classmethod
    def from_config(cls, config: BundleConfig, **kwargs) -> Bundler:
        return cls(
            ModuleResolver.from_config(config),
            lua_version=config.lua_version,
            isolate=config.isolate,
            metadata=config.metadata,
            encoding=config.encoding,
            **kwargs,
        )

    def bundle(self, entry_path: str | Path) -> BundleResult:
        """Bundle the entry script.

        Raises:
            OSError: Entry or module file cannot be read
            LuaSyntaxError: A source file is not valid for the dialect
            UnresolvedModuleError: A non-ignored module matched no path pattern
            NonLiteralRequireError: A dynamic require with no expression handler
        """
        modules: dict[str, BundledModule] = {}
        ignored: set[str] = set()

        self._process(ROOT_MODULE_NAME, str(entry_path), modules, ignored)

        ordered = list(modules.values())
        logger.info(
            f"[bundle] {entry_path}: {len(ordered) - 1} modules inlined, {len(ignored)} left to runtime host"
        )
        return BundleResult(content=self.render(ordered), modules=ordered, ignored=sorted(ignored))

    def render(self, modules: list[BundledModule]) -> str:
        parts = []
        if self.metadata:
            parts.append(render_metadata(self.lua_version.value, __version__))
        parts.append(render_prelude(self.isolate))
        parts.extend(render_module(module.name, module.content) for module in modules)
        parts.append(render_footer())
        return "".join(parts)

    def _process(self, name: str, path: str, modules: dict[str, BundledModule], ignored: set[str]) -> None:
        logger.debug(f"[bundle] processing {name} ({path})")
        source = strip_shebang(Path(path).read_text(encoding=self.encoding))

        module = BundledModule(name=name, path=path, content=source)
        modules[name] = module

        for dependency in self._dependencies(module, find_requires(source, self.lua_version, path)):
            if dependency in module.requires:
                continue
            module.requires.append(dependency)

            if dependency in modules:
                continue

            dependency_path, layer = self.resolver.resolve_with_layer(dependency)
            if layer == LAYER_IGNORED:
                ignored.add(dependency)
                continue
            if layer == LAYER_MISSING:
                raise UnresolvedModuleError(dependency, name, self.resolver.candidates(dependency))

            self._process(dependency, dependency_path, modules, ignored)

    def _dependencies(self, module: BundledModule, calls: list[RequireCall]) -> list[str]:
        names: list[str] = []
        for call in calls:
            if call.is_literal:
                names.append(call.name)
                continue

            if self.expression_handler is None:
                raise NonLiteralRequireError(module.name, call.expression, call.line, call.column)

            handled = self.expression_handler(module.name, call.expression)
            if handled is None:
                logger.debug(f"[bundle] {module.name}: leaving require{call.expression} to run time")
            elif isinstance(handled, str):
                names.append(handled)
            else:
                names.extend(handled)
        return names


def bundle(entry_path: str | Path, config: BundleConfig, **kwargs) -> BundleResult:
    """Bundle an entry script using the resolver and options from config."""
    return Bundler.from_config(config, **kwargs).bundle(entry_path)
