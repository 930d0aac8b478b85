"""Tests for the tsconfig probe."""

import json

import pytest

from package_insight.exceptions import ManifestError, ProbeFailure
from package_insight.probes.compiler_config import analyze_compiler_config
from package_insight.probes.filesystem import strip_json_comments

TSCONFIG_WITH_COMMENTS = """
// Base compiler options
{
  "extends": "./tsconfig.base.json",
  "compilerOptions": {
    /* modern output */
    "target": "ES2020",
    "module": "ESNext",
    "strict": true,
    "declaration": true,
    "declarationMap": false,
    "esModuleInterop": true,
    "baseUrl": ".",
    "paths": {
      "@/*": ["src/*"],  // alias
    },
    "lib": ["ES2020", "DOM",],
  },
  "include": ["src"],
  "references": [{"path": "./packages/core"}],
}
"""


class TestStripJsonComments:
    def test_keeps_comment_markers_inside_strings(self):
        text = '{"a": "src/*", "b": "http://example.com" /* c */, "d": "x//y"} // tail'
        assert json.loads(strip_json_comments(text)) == {
            "a": "src/*",
            "b": "http://example.com",
            "d": "x//y",
        }

    def test_drops_trailing_commas(self):
        assert strip_json_comments('{"a": [1, 2,], }').replace(" ", "") == '{"a":[1,2]}'


class TestAnalyzeCompilerConfig:
    def test_parses_json_with_comments(self, make_package):
        pkg = make_package(files={"tsconfig.json": TSCONFIG_WITH_COMMENTS})

        tc = analyze_compiler_config(pkg)

        assert tc.present
        assert tc.path.endswith("tsconfig.json")
        assert tc.target == "ES2020"
        assert tc.module == "ESNext"
        assert tc.strict is True
        assert tc.declaration is True
        assert tc.declaration_map is False
        assert tc.es_module_interop is True
        assert tc.paths == 1
        assert tc.references == 1
        assert tc.lib == ("ES2020", "DOM")
        assert tc.include == ("src",)
        assert tc.extends == "./tsconfig.base.json"

    def test_unset_options_are_none(self, make_package):
        pkg = make_package(files={"tsconfig.json": '{"compilerOptions": {}}'})

        tc = analyze_compiler_config(pkg)

        assert tc.present
        assert tc.strict is None
        assert tc.target is None
        assert tc.paths == 0

    def test_falls_back_to_build_config(self, make_package):
        pkg = make_package(files={"tsconfig.build.json": '{"compilerOptions": {"target": "es5"}}'})

        tc = analyze_compiler_config(pkg)

        assert tc.path.endswith("tsconfig.build.json")
        assert tc.target == "es5"

    def test_extends_list_is_joined(self, make_package):
        pkg = make_package(files={"tsconfig.json": '{"extends": ["./a.json", "./b.json"]}'})
        assert analyze_compiler_config(pkg).extends == "./a.json, ./b.json"

    def test_missing_config_is_absent(self, make_package):
        tc = analyze_compiler_config(make_package())

        assert tc.absent
        assert tc.failure is ProbeFailure.MISSING

    def test_invalid_config_raises(self, make_package):
        pkg = make_package(files={"tsconfig.json": '{"compilerOptions": {"target": }'})
        with pytest.raises(ManifestError):
            analyze_compiler_config(pkg)
