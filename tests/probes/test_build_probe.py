"""Tests for the build timing probe."""

from package_insight.exceptions import ProbeFailure
from package_insight.probes.build import measure_build, skipped_build


class TestMeasureBuild:
    def test_successful_build(self, make_package, fake_shell):
        pkg = make_package()
        fake_shell.on("npm", "run", "clean")
        fake_shell.on("npm", "run", "build", duration_ms=4321)

        b = measure_build(pkg)

        assert b.present
        assert b.success
        assert b.duration_ms == 4321
        assert fake_shell.commands() == [("npm", "run", "clean"), ("npm", "run", "build")]
        assert fake_shell.calls[1]["env"] == {"FORCE_COLOR": "0"}

    def test_failing_clean_is_ignored(self, make_package, fake_shell):
        pkg = make_package()
        fake_shell.on("npm", "run", "clean", fail="missing script: clean")
        fake_shell.on("npm", "run", "build", duration_ms=100)

        b = measure_build(pkg)

        assert b.success
        assert b.duration_ms == 100

    def test_failing_build(self, make_package, fake_shell):
        pkg = make_package()
        fake_shell.on("npm", "run", "clean")
        fake_shell.on("npm", "run", "build", fail="error TS2322")

        b = measure_build(pkg)

        assert b.failed
        assert not b.success
        assert b.duration_ms is None
        assert b.failure is ProbeFailure.COMMAND_FAILURE
        assert "TS2322" in b.error

    def test_custom_npm_command_and_timeout(self, make_package, fake_shell):
        pkg = make_package()
        fake_shell.on("pnpm", "run", "build")

        measure_build(pkg, npm_command="pnpm", timeout=30)

        assert fake_shell.calls[-1]["args"] == ("pnpm", "run", "build")
        assert fake_shell.calls[-1]["timeout"] == 30

    def test_skipped(self):
        b = skipped_build()
        assert b.absent
        assert not b.success
