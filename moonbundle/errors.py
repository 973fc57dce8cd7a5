"""Exception types raised while bundling.

Every failure the bundler detects itself derives from BundleError so the CLI
can report it with a single handler. I/O failures (missing entry file,
unwritable output) are left as the OSError that triggered them.
"""


class BundleError(Exception):
    """Base class for bundling failures."""


class ConfigurationError(BundleError):
    """Invalid bundle configuration (bad settings file, malformed pattern)."""


class UnresolvedModuleError(BundleError):
    """A required module is not ignored and no path pattern matched it."""

    def __init__(self, module_name: str, required_by: str, candidates: list[str] | None = None):
        self.module_name = module_name
        self.required_by = required_by
        self.candidates = list(candidates or [])

        message = f"Could not resolve module '{module_name}' (required by '{required_by}')"
        if self.candidates:
            tried = "\n".join(f"  - {path}" for path in self.candidates)
            message += f"\n\nResolution attempted:\n{tried}"
        super().__init__(message)


class NonLiteralRequireError(BundleError):
    """A require call whose argument is not a single string literal."""

    def __init__(self, module_name: str, expression: str, line: int, column: int):
        self.module_name = module_name
        self.expression = expression
        self.line = line
        self.column = column
        super().__init__(
            f"Non-literal require found in '{module_name}' at {line}:{column}: require{expression}"
        )


class LuaSyntaxError(BundleError):
    """Source could not be tokenized for the configured Lua dialect."""

    def __init__(self, chunk_name: str, line: int, column: int, detail: str):
        self.chunk_name = chunk_name
        self.line = line
        self.column = column
        self.detail = detail
        super().__init__(f"{chunk_name}:{line}:{column}: {detail}")
