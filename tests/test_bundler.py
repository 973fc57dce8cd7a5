"""Tests for the bundle driver."""

from pathlib import Path

import pytest

from moonbundle import __version__
from moonbundle.bundler import ROOT_MODULE_NAME
from moonbundle.bundler import Bundler
from moonbundle.bundler import bundle
from moonbundle.bundler.bundle import strip_shebang
from moonbundle.config import BundleConfig
from moonbundle.config import LuaVersion
from moonbundle.errors import LuaSyntaxError
from moonbundle.errors import NonLiteralRequireError
from moonbundle.errors import UnresolvedModuleError
from moonbundle.resolution import ModuleResolver

ENTRY = "src/smsmenu.lua"


def make_bundler(**kwargs) -> Bundler:
    return Bundler.from_config(BundleConfig(), **kwargs)


def register_line(name: str) -> str:
    return f'__bundle_register("{name}", function(require, _LOADED, __bundle_register, __bundle_modules, ...)\n'


class TestResolution:
    def test_module_found_under_src(self, lua_project):
        lua_project.write(ENTRY, 'local bar = require("foo.bar")\nbar.run()\n')
        lua_project.write("src/foo/bar.lua", "return { run = function() end }\n")

        result = make_bundler().bundle(ENTRY)

        assert result.module_names == [ROOT_MODULE_NAME, "foo.bar"]
        assert Path(result.modules[1].path) == Path("src/foo/bar.lua")
        assert register_line("foo.bar") in result.content
        assert "return { run = function() end }\n" in result.content

    def test_init_file_pattern(self, lua_project):
        lua_project.write(ENTRY, 'require("ui")\n')
        lua_project.write("src/ui/init.lua", "return 'ui'\n")

        result = make_bundler().bundle(ENTRY)
        assert Path(result.modules[1].path) == Path("src/ui/init.lua")

    def test_ignored_module_is_not_inlined(self, lua_project):
        lua_project.write(ENTRY, "local ml = require('lib.moonloader')\nlocal menu = require('menu')\n")
        lua_project.write("src/menu.lua", "return {}\n")
        # Even a local copy of an ignored module must not be bundled
        lua_project.write("lib/moonloader.lua", "return 'local copy'\n")

        result = make_bundler().bundle(ENTRY)

        assert result.module_names == [ROOT_MODULE_NAME, "menu"]
        assert result.ignored == ["lib.moonloader"]
        assert '__bundle_register("lib.moonloader"' not in result.content
        assert "local copy" not in result.content
        # The reference stays in place for the host's require
        assert "require('lib.moonloader')" in result.content

    def test_unresolved_module_fails(self, lua_project):
        lua_project.write(ENTRY, "require('menu')\n")
        lua_project.write("src/menu.lua", "require('menu.missing')\n")

        with pytest.raises(UnresolvedModuleError) as exc_info:
            make_bundler().bundle(ENTRY)

        error = exc_info.value
        assert error.module_name == "menu.missing"
        assert error.required_by == "menu"
        assert len(error.candidates) == 4
        assert "menu.missing" in str(error)

    def test_missing_entry_raises_os_error(self, lua_project):
        with pytest.raises(FileNotFoundError):
            make_bundler().bundle(ENTRY)

    def test_syntax_error_names_the_file(self, lua_project):
        lua_project.write(ENTRY, "require('bad')\n")
        bad = lua_project.write("src/bad.lua", "local x = 1 & 2\n")

        with pytest.raises(LuaSyntaxError) as exc_info:
            make_bundler().bundle(ENTRY)
        assert Path(exc_info.value.chunk_name) == Path("src/bad.lua")
        assert bad.exists()


class TestGraph:
    def test_depth_first_source_order(self, lua_project):
        lua_project.write(ENTRY, "require('a')\nrequire('d')\n")
        lua_project.write("src/a.lua", "require('b')\n")
        lua_project.write("src/b.lua", "require('c')\n")
        lua_project.write("src/c.lua", "return 'c'\n")
        lua_project.write("src/d.lua", "require('b')\n")

        result = make_bundler().bundle(ENTRY)
        assert result.module_names == [ROOT_MODULE_NAME, "a", "b", "c", "d"]

    def test_cycle_registers_each_module_once(self, lua_project):
        lua_project.write(ENTRY, "require('a')\n")
        lua_project.write("src/a.lua", "require('b')\nreturn {}\n")
        lua_project.write("src/b.lua", "require('a')\nreturn {}\n")

        result = make_bundler().bundle(ENTRY)

        assert result.module_names == [ROOT_MODULE_NAME, "a", "b"]
        assert result.content.count('__bundle_register("a"') == 1
        assert result.content.count('__bundle_register("b"') == 1

    def test_duplicate_requires_recorded_once(self, lua_project):
        lua_project.write(ENTRY, "require('a')\nrequire('a')\nrequire('ffi')\nrequire('ffi')\n")
        lua_project.write("src/a.lua", "return 1\n")

        result = make_bundler().bundle(ENTRY)
        assert result.modules[0].requires == ["a", "ffi"]
        assert result.ignored == ["ffi"]


class TestNonLiteralRequires:
    def test_fails_without_handler(self, lua_project):
        lua_project.write(ENTRY, "local name = 'a'\nrequire(name)\n")

        with pytest.raises(NonLiteralRequireError) as exc_info:
            make_bundler().bundle(ENTRY)
        assert exc_info.value.module_name == ROOT_MODULE_NAME
        assert exc_info.value.line == 2

    def test_handler_supplies_module_names(self, lua_project):
        lua_project.write(ENTRY, "require(name)\n")
        lua_project.write("src/a.lua", "return 1\n")
        lua_project.write("src/b.lua", "return 2\n")
        seen = []

        def handler(module_name, expression):
            seen.append((module_name, expression))
            return ["a", "b"]

        result = make_bundler(expression_handler=handler).bundle(ENTRY)

        assert seen == [(ROOT_MODULE_NAME, "(name)")]
        assert result.module_names == [ROOT_MODULE_NAME, "a", "b"]

    def test_handler_may_skip(self, lua_project):
        lua_project.write(ENTRY, "require(name)\n")
        result = make_bundler(expression_handler=lambda module, expr: None).bundle(ENTRY)
        assert result.module_names == [ROOT_MODULE_NAME]


class TestRendering:
    def test_layout(self, lua_project):
        lua_project.write(ENTRY, "print(require('a'))\n")
        lua_project.write("src/a.lua", "return 'a'")

        content = make_bundler().bundle(ENTRY).content
        lines = content.splitlines()

        assert lines[0] == f'-- Bundled by moonbundle {{"luaVersion":"LuaJIT","version":"{__version__}"}}'
        assert content.index(register_line(ROOT_MODULE_NAME)) < content.index(register_line("a"))
        # Module bodies always end with a newline before 'end)'
        assert "return 'a'\nend)\n" in content
        assert content.endswith('return __bundle_require("__root")\n')

    def test_fallback_to_host_require_unless_isolated(self, lua_project):
        lua_project.write(ENTRY, "return 1\n")

        open_bundle = make_bundler().bundle(ENTRY).content
        sealed = Bundler(ModuleResolver.from_config(BundleConfig()), isolate=True).bundle(ENTRY).content

        assert "end)(require)\n" in open_bundle
        assert "end)(nil)\n" in sealed

    def test_metadata_can_be_disabled(self, lua_project):
        lua_project.write(ENTRY, "return 1\n")
        content = bundle(ENTRY, BundleConfig(metadata=False)).content
        assert content.startswith("local __bundle_require, __bundle_loaded, __bundle_register, __bundle_modules")

    def test_metadata_names_dialect(self, lua_project):
        lua_project.write(ENTRY, "return 1\n")
        content = bundle(ENTRY, BundleConfig(lua_version=LuaVersion.LUA53)).content
        assert '"luaVersion":"5.3"' in content.splitlines()[0]

    def test_shebang_removed_from_module_body(self, lua_project):
        lua_project.write(ENTRY, "#!/usr/bin/env luajit\nprint('hi')\n")
        content = make_bundler().bundle(ENTRY).content
        assert "#!/usr/bin/env luajit" not in content
        assert "print('hi')" in content

    def test_output_is_deterministic(self, lua_project):
        lua_project.write(ENTRY, "require('b')\nrequire('a')\nrequire('lfs')\n")
        lua_project.write("src/a.lua", "return 'a'\n")
        lua_project.write("src/b.lua", "require('a')\nreturn 'b'\n")

        first = make_bundler().bundle(ENTRY).content
        second = make_bundler().bundle(ENTRY).content
        assert first == second


def test_strip_shebang():
    assert strip_shebang("#!lua\nx") == "\nx"
    assert strip_shebang("#only") == ""
    assert strip_shebang("x = '#'") == "x = '#'"
