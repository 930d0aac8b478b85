"""tsconfig probe."""

from pathlib import Path
from typing import Any, Optional, Tuple

from ..exceptions import ManifestError, ProbeFailure
from ..logging_config import get_logger
from ..snapshot.models import CompilerConfigInfo, SectionStatus
from .filesystem import first_existing, read_json

logger = get_logger(__name__)

# Searched in this order; the first one found wins
CONFIG_CANDIDATES = ("tsconfig.json", "tsconfig.build.json", "tsconfig.esm.json")


def find_compiler_config(package_dir: Path) -> Optional[Path]:
    return first_existing(package_dir, CONFIG_CANDIDATES, want_dir=False)


def analyze_compiler_config(package_dir: Path) -> CompilerConfigInfo:
    """
    Read the TypeScript compiler configuration.

    Comments and trailing commas are accepted, as tsc itself does.

    Raises:
        FileAccessError: If the file cannot be read
        ManifestError: If the file is not valid JSON-with-comments
    """
    path = find_compiler_config(package_dir)
    if path is None:
        logger.warning("tsconfig.json not found in %s", package_dir)
        return CompilerConfigInfo(failure=ProbeFailure.MISSING, error="tsconfig.json not found")

    data = read_json(path, allow_comments=True)
    if not isinstance(data, dict):
        raise ManifestError(path, "top-level value is not an object")

    options = data.get("compilerOptions")
    if not isinstance(options, dict):
        options = {}

    paths = options.get("paths")
    references = data.get("references")

    return CompilerConfigInfo(
        status=SectionStatus.PRESENT,
        path=str(path),
        target=_opt_str(options.get("target")),
        module=_opt_str(options.get("module")),
        declaration=_opt_bool(options.get("declaration")),
        declaration_map=_opt_bool(options.get("declarationMap")),
        source_map=_opt_bool(options.get("sourceMap")),
        strict=_opt_bool(options.get("strict")),
        es_module_interop=_opt_bool(options.get("esModuleInterop")),
        skip_lib_check=_opt_bool(options.get("skipLibCheck")),
        force_consistent_casing=_opt_bool(options.get("forceConsistentCasingInFileNames")),
        out_dir=_opt_str(options.get("outDir")),
        root_dir=_opt_str(options.get("rootDir")),
        composite=_opt_bool(options.get("composite")),
        incremental=_opt_bool(options.get("incremental")),
        jsx=_opt_str(options.get("jsx")),
        lib=_str_tuple(options.get("lib")),
        types=_str_tuple(options.get("types")),
        paths=len(paths) if isinstance(paths, dict) else 0,
        base_url=_opt_str(options.get("baseUrl")),
        resolve_json_module=_opt_bool(options.get("resolveJsonModule")),
        module_resolution=_opt_str(options.get("moduleResolution")),
        extends=_opt_str(data.get("extends")),
        include=_str_tuple(data.get("include")),
        exclude=_str_tuple(data.get("exclude")),
        references=len(references) if isinstance(references, list) else 0,
    )


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, list):
        # "extends" may be an array since TypeScript 5.0
        return ", ".join(str(v) for v in value)
    return str(value)


def _opt_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, list):
        return tuple(str(v) for v in value)
    if isinstance(value, str):
        return (value,)
    return ()
