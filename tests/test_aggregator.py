"""Tests for PackageAnalyzer (all external commands faked)."""

import json
from datetime import datetime, timezone

import pytest

from package_insight.analysis import PackageAnalyzer, run_paths
from package_insight.config import AnalysisConfig
from package_insight.exceptions import InvalidPathError, ProbeFailure
from package_insight.snapshot.models import SectionStatus

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

MANIFEST = {
    "name": "my-lib",
    "version": "1.2.0",
    "main": "dist/index.js",
    "types": "dist/index.d.ts",
    "scripts": {"build": "tsc"},
    "dependencies": {"left-pad": "^1.3.0"},
    "devDependencies": {"typescript": "^5.0.0", "@types/node": "^20.0.0"},
}


def _full_package(make_package):
    return make_package(
        manifest=MANIFEST,
        files={
            "tsconfig.json": '{"compilerOptions": {"strict": true, "declaration": true}}',
            "src/index.ts": "export const x = 1;\n",
            "dist/index.js": "export const x = 1;\n",
            "dist/index.d.ts": "export declare const x: number;\n",
            "node_modules/left-pad/package.json": json.dumps({"version": "1.3.0"}),
            "node_modules/left-pad/index.js": "module.exports = 1;\n",
        },
    )


class TestPackageAnalyzer:
    def test_full_run(self, make_package, fake_shell, pack_action, isolated_env):
        pkg = _full_package(make_package)
        fake_shell.on("npm", "run", "build", duration_ms=2500)
        fake_shell.on("npm", "run", "clean")
        fake_shell.on("npm", "view", fail="404 Not Found")
        fake_shell.on(
            "npm", "pack", stdout="my-lib-1.2.0.tgz\n", action=pack_action("my-lib-1.2.0.tgz", 400)
        )
        fake_shell.on(
            "npm",
            "pack",
            "--dry-run",
            stderr="npm notice === Tarball Contents ===\nnpm notice 20B dist/index.js\n"
            "npm notice === Tarball Details ===\n",
        )

        s = PackageAnalyzer(str(pkg)).build_snapshot(now=NOW)

        assert s.package_name == "my-lib"
        assert s.created_at == "2024-06-01T12:00:00.000+00:00"
        assert s.manifest.present and s.manifest.version == "1.2.0"
        assert s.version.present
        assert s.version.git.absent
        assert s.version.registry.failure is ProbeFailure.COMMAND_FAILURE
        assert s.compiler_config.present and s.compiler_config.strict is True
        assert s.build.success and s.build.duration_ms == 2500
        assert s.dist.present and s.dist.files.dts_files == 1
        assert s.dependencies.counts.dependencies == 1
        assert s.dependencies.counts.type_definitions == 1
        assert s.dependency_sizes.present
        assert s.dependency_sizes.dependency_sizes[0].name == "left-pad"
        assert s.package_size.success and s.package_size.packed_size == 400

    def test_malformed_manifest_only_fails_its_readers(self, make_package, fake_shell):
        pkg = make_package(manifest="{not json", files={"dist/index.js": "x"})

        s = PackageAnalyzer(str(pkg), AnalysisConfig(run_build=False, run_pack=False)).build_snapshot(
            now=NOW
        )

        for section in (s.manifest, s.version, s.dependencies):
            assert section.status is SectionStatus.ERROR
            assert section.failure is ProbeFailure.PARSE_ERROR
            assert section.error
        assert s.dist.present
        assert s.dist.files.js_files == 1
        assert s.compiler_config.absent

    def test_missing_manifest(self, make_package, fake_shell):
        pkg = make_package(manifest=None)

        s = PackageAnalyzer(str(pkg), AnalysisConfig(run_build=False, run_pack=False)).build_snapshot()

        assert s.manifest.absent
        assert s.manifest.failure is ProbeFailure.MISSING
        assert s.dependencies.absent

    def test_skip_flags(self, make_package, fake_shell):
        pkg = make_package()

        s = PackageAnalyzer(str(pkg), AnalysisConfig(run_build=False, run_pack=False)).build_snapshot()

        assert s.build.absent
        assert s.package_size.absent
        assert not any(c[:2] in (("npm", "pack"), ("npm", "run")) for c in fake_shell.commands())

    def test_progress_messages(self, make_package, fake_shell):
        pkg = make_package()
        messages = []

        PackageAnalyzer(str(pkg), AnalysisConfig(run_build=False, run_pack=False)).build_snapshot(
            on_progress=messages.append
        )

        assert messages[0] == "Analyzing package.json..."
        assert "Analyzing distribution files..." in messages
        assert "Measuring build time..." not in messages

    def test_missing_path(self, tmp_path):
        with pytest.raises(InvalidPathError):
            PackageAnalyzer(str(tmp_path / "nope"))

    def test_path_is_a_file(self, tmp_path):
        target = tmp_path / "package.json"
        target.write_text("{}")
        with pytest.raises(InvalidPathError):
            PackageAnalyzer(str(target))


class TestRunPaths:
    def test_relative_root(self, tmp_path):
        paths = run_paths("my-lib", AnalysisConfig(), cwd=tmp_path)

        assert paths.output_dir == tmp_path / "package-analysis" / "my-lib"
        assert paths.history_dir == paths.output_dir / "history"
        assert paths.pack_dir == paths.output_dir / "pack-analysis"

    def test_absolute_root(self, tmp_path):
        root = tmp_path / "reports"
        paths = run_paths("my-lib", AnalysisConfig(output_root=str(root)), cwd=tmp_path / "elsewhere")

        assert paths.output_dir == root / "my-lib"
