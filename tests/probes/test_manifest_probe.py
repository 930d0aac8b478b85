"""Tests for the package.json probe."""

import pytest

from package_insight.exceptions import ManifestError, ProbeFailure
from package_insight.probes.manifest import analyze_manifest
from package_insight.snapshot.models import SectionStatus


class TestAnalyzeManifest:
    def test_reads_fields_and_flags(self, make_package):
        pkg = make_package(
            {
                "name": "my-lib",
                "version": "2.1.0",
                "description": "Utilities",
                "author": {"name": "Jane Doe", "email": "jane@example.com"},
                "license": "MIT",
                "main": "dist/index.cjs",
                "module": "dist/index.mjs",
                "typings": "dist/index.d.ts",
                "exports": {".": "./dist/index.mjs"},
                "scripts": {"build": "tsc", "test": "vitest", "eslint": "eslint src"},
                "dependencies": {"a": "1", "b": "2"},
                "devDependencies": {"typescript": "5"},
                "publishConfig": {"sourcemap": True},
                "sideEffects": ["*.css"],
                "files": ["dist"],
            }
        )

        m = analyze_manifest(pkg)

        assert m.status is SectionStatus.PRESENT
        assert m.name == "my-lib"
        assert m.version == "2.1.0"
        assert m.author == "Jane Doe <jane@example.com>"
        assert m.types == "dist/index.d.ts"
        assert m.has_esm and m.has_cjs and m.has_types and m.has_exports
        assert m.has_build_script and m.has_test_script
        assert m.has_lint_script  # "eslint" counts as a lint script
        assert not m.has_prettier_script
        assert m.script_names == ("build", "eslint", "test")
        assert m.dependencies == 2
        assert m.dev_dependencies == 1
        assert m.has_source_maps is True
        assert m.side_effects is True
        assert m.files == ("dist",)

    def test_minimal_manifest(self, make_package):
        m = analyze_manifest(make_package({"name": "bare"}))

        assert m.present
        assert m.version is None
        assert not m.has_build_script
        assert not m.has_test_script
        assert m.script_names == ()
        assert m.side_effects is None

    def test_side_effects_false_is_kept(self, make_package):
        m = analyze_manifest(make_package({"name": "x", "sideEffects": False}))
        assert m.side_effects is False

    def test_missing_manifest_is_absent(self, make_package):
        m = analyze_manifest(make_package(manifest=None))

        assert m.absent
        assert m.failure is ProbeFailure.MISSING

    def test_malformed_manifest_raises(self, make_package):
        with pytest.raises(ManifestError):
            analyze_manifest(make_package('{"name": "broken",'))

    def test_non_object_manifest_raises(self, make_package):
        with pytest.raises(ManifestError):
            analyze_manifest(make_package("[1, 2, 3]"))
