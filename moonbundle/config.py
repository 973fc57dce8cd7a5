"""Bundle configuration.

The defaults below are the build's embedded constants: running the CLI with no
arguments bundles ``src/smsmenu.lua`` into ``build/smsmenu.lua``. A YAML file
may override any field:

```yaml
entry: src/smsmenu.lua
output_dir: build
output_file: smsmenu.lua
lua_version: LuaJIT
isolate: false
paths:
  - "?.lua"
  - "src/?.lua"
ignored_modules:
  - lib.moonloader
```
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PATH_PLACEHOLDER = "?"

DEFAULT_PATHS = [
    "?.lua",
    "?/init.lua",
    "src/?.lua",
    "src/?/init.lua",
]

# Resolved by MoonLoader at runtime, never bundled
DEFAULT_IGNORED_MODULES = [
    "lib.moonloader",
    "lib.mimgui",
    "ffi",
    "lib.dkjson",
    "lfs",
    "lib.samp.events",
    "encoding",
]


class LuaVersion(str, Enum):
    """Lua dialect the sources are written in.

    Only affects which syntax the lexer accepts while scanning for requires.
    """

    LUA51 = "5.1"
    LUA52 = "5.2"
    LUA53 = "5.3"
    LUAJIT = "LuaJIT"


class BundleConfig(BaseModel):
    """Everything a single bundling run needs."""

    model_config = ConfigDict(extra="forbid")

    entry: Path = Field(default=Path("src/smsmenu.lua"), description="Entry Lua script")
    output_dir: Path = Field(default=Path("build"), description="Directory the bundle is written to")
    output_file: str = Field(default="smsmenu.lua", description="Bundle file name inside output_dir")
    lua_version: LuaVersion = Field(default=LuaVersion.LUAJIT, description="Source dialect")
    isolate: bool = Field(
        default=False, description="Seal the bundle; when false, unknown modules fall back to the host require"
    )
    metadata: bool = Field(default=True, description="Emit the '-- Bundled by' header line")
    encoding: str = Field(default="utf-8", description="Text encoding of Lua sources and the bundle")
    paths: list[str] = Field(default_factory=lambda: list(DEFAULT_PATHS), description="Ordered path patterns")
    ignored_modules: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_MODULES), description="Modules left to the runtime host"
    )

    @field_validator("paths")
    @classmethod
    def check_paths(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one path pattern is required")
        for pattern in value:
            if PATH_PLACEHOLDER not in pattern:
                raise ValueError(f"path pattern '{pattern}' has no '{PATH_PLACEHOLDER}' placeholder")
        return value

    @field_validator("output_file")
    @classmethod
    def check_output_file(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError(f"output_file must be a plain file name, got '{value}'")
        return value

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.output_file


def load_config(path: Path | None = None) -> BundleConfig:
    """Build the run configuration.

    Args:
        path: Optional YAML file whose keys override the embedded defaults

    Returns:
        Validated BundleConfig

    Raises:
        ConfigurationError: The file is unreadable, not a mapping, or fails validation
    """
    overrides: dict = {}

    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

        overrides = data
        logger.debug(f"[config] loaded overrides from {path}: {list(overrides)}")

    try:
        return BundleConfig.model_validate(overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid bundle configuration: {problems}") from e
