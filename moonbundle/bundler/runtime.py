"""Lua text emitted around the bundled modules.

Layout of a bundle:

    -- Bundled by moonbundle {...}                   (optional metadata line)
    local __bundle_require, ... = (function(superRequire) ... end)(require)
    __bundle_register("__root", function(require, _LOADED, __bundle_register, __bundle_modules, ...)
    <entry script>
    end)
    __bundle_register("foo.bar", function(...) <module> end)
    return __bundle_require("__root")

Every module body runs inside its own function, executed at most once and
cached under its module name. ``superRequire`` is the host's ``require`` when
the bundle is not isolated, so names that were never registered (modules left
to the runtime host) are forwarded to it.
"""

import json

ROOT_MODULE_NAME = "__root"

REQUIRE_IDENTIFIER = "__bundle_require"
LOADED_IDENTIFIER = "__bundle_loaded"
REGISTER_IDENTIFIER = "__bundle_register"
MODULES_IDENTIFIER = "__bundle_modules"

METADATA_PREFIX = "-- Bundled by moonbundle "

PRELUDE_TEMPLATE = """\
local {require}, {loaded}, {register}, {modules} = (function(superRequire)
\tlocal loadingPlaceholder = {{[{{}}] = true}}

\tlocal register
\tlocal modules = {{}}

\tlocal require
\tlocal loaded = {{}}

\tregister = function(name, body)
\t\tif not modules[name] then
\t\t\tmodules[name] = body
\t\tend
\tend

\trequire = function(name)
\t\tlocal loadedModule = loaded[name]

\t\tif loadedModule then
\t\t\tif loadedModule == loadingPlaceholder then
\t\t\t\treturn nil
\t\t\tend
\t\telse
\t\t\tif not modules[name] then
\t\t\t\tif not superRequire then
\t\t\t\t\tlocal identifier = type(name) == 'string' and '"' .. name .. '"' or tostring(name)
\t\t\t\t\terror('Tried to require ' .. identifier .. ', but no such module has been registered')
\t\t\t\telse
\t\t\t\t\treturn superRequire(name)
\t\t\t\tend
\t\t\tend

\t\t\tloaded[name] = loadingPlaceholder
\t\t\tloadedModule = modules[name](require, loaded, register, modules, name)
\t\t\tif loadedModule == nil then
\t\t\t\tloadedModule = true
\t\t\tend
\t\t\tloaded[name] = loadedModule
\t\tend

\t\treturn loadedModule
\tend

\treturn require, loaded, register, modules
end)({super_require})
"""

_LUA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def lua_string(value: str) -> str:
    """Quote a Python string as a double-quoted Lua string literal."""
    out = []
    for char in value:
        if char in _LUA_ESCAPES:
            out.append(_LUA_ESCAPES[char])
        elif ord(char) < 32 or ord(char) == 127:
            out.append(f"\\{ord(char):03d}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def render_metadata(lua_version: str, version: str) -> str:
    payload = json.dumps({"luaVersion": lua_version, "version": version}, separators=(",", ":"))
    return f"{METADATA_PREFIX}{payload}\n"


def render_prelude(isolate: bool) -> str:
    return PRELUDE_TEMPLATE.format(
        require=REQUIRE_IDENTIFIER,
        loaded=LOADED_IDENTIFIER,
        register=REGISTER_IDENTIFIER,
        modules=MODULES_IDENTIFIER,
        super_require="nil" if isolate else "require",
    )


def render_module(name: str, content: str) -> str:
    """Wrap one module body in its registration call."""
    if content and not content.endswith("\n"):
        content += "\n"
    return (
        f"{REGISTER_IDENTIFIER}({lua_string(name)}, "
        f"function(require, _LOADED, {REGISTER_IDENTIFIER}, {MODULES_IDENTIFIER}, ...)\n"
        f"{content}"
        f"end)\n"
    )


def render_footer() -> str:
    return f"return {REQUIRE_IDENTIFIER}({lua_string(ROOT_MODULE_NAME)})\n"
