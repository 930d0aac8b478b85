"""Build output (dist) probe."""

from pathlib import Path
from typing import List, Optional

from ..exceptions import ProbeFailure
from ..logging_config import get_logger
from ..snapshot.models import (
    DistFileStats,
    DistInfo,
    DistSizeStats,
    ModuleFormatInfo,
    SectionStatus,
)
from .filesystem import file_size, first_existing, read_text, total_size, walk_files

logger = get_logger(__name__)

# Searched in this order; the first one found wins
DIST_CANDIDATES = ("dist", "build", "lib", "out", "esm", "cjs")

ESM_MARKERS = ("export ", "import ")
CJS_MARKERS = ("require(", "module.exports")
SOURCE_MAP_MARKER = "sourceMappingURL"


def find_dist_directory(package_dir: Path) -> Optional[Path]:
    return first_existing(package_dir, DIST_CANDIDATES, want_dir=True)


def analyze_dist(package_dir: Path) -> DistInfo:
    """
    Count and size the files of the build output directory.

    JavaScript files are also scanned for module syntax: a file using
    ``import``/``export`` counts as ESM, one using ``require(`` or
    ``module.exports`` as CommonJS (a file may count as both).

    Raises:
        FileAccessError: If a JavaScript file cannot be read
    """
    dist_path = find_dist_directory(package_dir)
    if dist_path is None:
        logger.warning("Distribution directory not found in %s", package_dir)
        return DistInfo(failure=ProbeFailure.MISSING, error="distribution directory not found")

    all_files = list(walk_files(dist_path))
    names = [p.name for p in all_files]

    js_files = _with_suffix(all_files, ".js")
    dts_files = _with_suffix(all_files, ".d.ts")
    map_files = _with_suffix(all_files, ".js.map")
    dts_map_files = _with_suffix(all_files, ".d.ts.map")
    json_count = sum(1 for n in names if n.endswith(".json"))
    css_count = sum(1 for n in names if n.endswith(".css"))

    other = [
        p
        for p in all_files
        if not p.name.endswith((".js", ".d.ts", ".js.map", ".d.ts.map"))
    ]

    sizes = DistSizeStats(
        js_size=total_size(js_files),
        dts_size=total_size(dts_files),
        map_size=total_size(map_files),
        dts_map_size=total_size(dts_map_files),
        other_size=total_size(other),
        total_size=sum(file_size(p) for p in all_files),
    )

    files = DistFileStats(
        js_files=len(js_files),
        dts_files=len(dts_files),
        map_files=len(map_files),
        dts_map_files=len(dts_map_files),
        json_files=json_count,
        css_files=css_count,
        other_files=len(all_files)
        - len(js_files)
        - len(dts_files)
        - len(map_files)
        - len(dts_map_files)
        - json_count
        - css_count,
        total_files=len(all_files),
    )

    esm = cjs = map_refs = 0
    for path in js_files:
        content = read_text(path)
        if any(marker in content for marker in ESM_MARKERS):
            esm += 1
        if any(marker in content for marker in CJS_MARKERS):
            cjs += 1
        if SOURCE_MAP_MARKER in content:
            map_refs += 1

    logger.debug(
        "dist %s: %d files, %d JS (%d ESM / %d CJS)",
        dist_path, len(all_files), len(js_files), esm, cjs,
    )

    return DistInfo(
        status=SectionStatus.PRESENT,
        path=str(dist_path),
        files=files,
        sizes=sizes,
        modules=ModuleFormatInfo(
            esm_modules=esm,
            cjs_modules=cjs,
            source_map_references=map_refs,
            has_both_module_types=esm > 0 and cjs > 0,
        ),
    )


def _with_suffix(paths: List[Path], suffix: str) -> List[Path]:
    return [p for p in paths if p.name.endswith(suffix)]
