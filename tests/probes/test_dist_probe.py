"""Tests for the build output probe."""

from package_insight.exceptions import ProbeFailure
from package_insight.probes.dist import analyze_dist, find_dist_directory

ESM_SOURCE = "export const a = 1;\n//# sourceMappingURL=index.js.map\n"
CJS_SOURCE = "module.exports = { b: 2 };\n"


class TestAnalyzeDist:
    def test_counts_and_sizes_by_kind(self, make_package):
        pkg = make_package(
            files={
                "dist/index.js": ESM_SOURCE,
                "dist/legacy/cjs.js": CJS_SOURCE,
                "dist/index.d.ts": "export declare const a: number;\n",
                "dist/index.js.map": "x" * 100,
                "dist/index.d.ts.map": "y" * 40,
                "dist/style.css": "body{}",
                "dist/meta.json": "{}",
                "dist/README.txt": "hello",
            }
        )

        d = analyze_dist(pkg)

        assert d.present
        assert d.path.endswith("dist")
        assert d.files.js_files == 2
        assert d.files.dts_files == 1
        assert d.files.map_files == 1
        assert d.files.dts_map_files == 1
        assert d.files.css_files == 1
        assert d.files.json_files == 1
        assert d.files.other_files == 1
        assert d.files.total_files == 8

        assert d.sizes.js_size == len(ESM_SOURCE) + len(CJS_SOURCE)
        assert d.sizes.map_size == 100
        assert d.sizes.dts_map_size == 40
        assert d.sizes.other_size == len("body{}") + len("{}") + len("hello")
        assert d.sizes.total_size == (
            d.sizes.js_size
            + d.sizes.dts_size
            + d.sizes.map_size
            + d.sizes.dts_map_size
            + d.sizes.other_size
        )

    def test_module_syntax_detection(self, make_package):
        pkg = make_package(files={"dist/index.js": ESM_SOURCE, "dist/cjs.js": CJS_SOURCE})

        mods = analyze_dist(pkg).modules

        assert mods.esm_modules == 1
        assert mods.cjs_modules == 1
        assert mods.source_map_references == 1
        assert mods.has_both_module_types

    def test_single_format_is_not_mixed(self, make_package):
        pkg = make_package(files={"dist/index.js": ESM_SOURCE})
        assert not analyze_dist(pkg).modules.has_both_module_types

    def test_candidate_order(self, make_package):
        pkg = make_package(files={"lib/index.js": CJS_SOURCE, "out/index.js": ESM_SOURCE})
        assert find_dist_directory(pkg).name == "lib"

    def test_file_named_dist_is_ignored(self, make_package):
        pkg = make_package(files={"dist": "not a directory", "build/index.js": CJS_SOURCE})
        assert find_dist_directory(pkg).name == "build"

    def test_missing_dist_is_absent(self, make_package):
        d = analyze_dist(make_package())

        assert d.absent
        assert d.failure is ProbeFailure.MISSING
        assert d.files.total_files == 0
