"""package.json probe."""

from pathlib import Path
from typing import Any, Dict

from ..exceptions import ManifestError, ProbeFailure
from ..formatting import format_author
from ..logging_config import get_logger
from ..snapshot.models import ManifestInfo, SectionStatus
from .filesystem import read_json

logger = get_logger(__name__)

MANIFEST_NAME = "package.json"


def load_manifest(package_dir: Path) -> Dict[str, Any]:
    """
    Parse ``package.json`` into a dict.

    Raises:
        FileAccessError: If the file cannot be read
        ManifestError: If it is not a JSON object
    """
    path = package_dir / MANIFEST_NAME
    data = read_json(path)
    if not isinstance(data, dict):
        raise ManifestError(path, "top-level value is not an object")
    return data


def analyze_manifest(package_dir: Path) -> ManifestInfo:
    """
    Read the package manifest.

    Returns an absent section when there is no package.json.

    Raises:
        FileAccessError: If the file cannot be read
        ManifestError: If the file is not valid JSON
    """
    path = package_dir / MANIFEST_NAME
    if not path.is_file():
        logger.warning("package.json not found in %s", package_dir)
        return ManifestInfo(failure=ProbeFailure.MISSING, error="package.json not found")

    data = load_manifest(package_dir)
    scripts = _mapping(data.get("scripts"))
    publish_config = _mapping(data.get("publishConfig"))
    types = data.get("types") or data.get("typings")

    side_effects = data.get("sideEffects")
    if not isinstance(side_effects, bool):
        # An array of globs means "some files have side effects"
        side_effects = True if isinstance(side_effects, list) else None

    files = data.get("files")
    if not isinstance(files, list):
        files = []

    return ManifestInfo(
        status=SectionStatus.PRESENT,
        name=_text(data.get("name")),
        version=_text(data.get("version")),
        description=_text(data.get("description")),
        author=format_author(data.get("author")) if data.get("author") else None,
        license=_text(data.get("license")),
        main=_text(data.get("main")),
        module=_text(data.get("module")),
        types=_text(types),
        has_esm=bool(data.get("module")),
        has_cjs=bool(data.get("main")),
        has_types=bool(types),
        has_exports=bool(data.get("exports")),
        script_names=tuple(sorted(scripts)),
        has_prepublish_script=bool(scripts.get("prepublish")),
        has_prepack_script=bool(scripts.get("prepack")),
        has_build_script=bool(scripts.get("build")),
        has_test_script=bool(scripts.get("test")),
        has_lint_script=bool(scripts.get("lint") or scripts.get("eslint")),
        has_prettier_script=bool(scripts.get("prettier")),
        dependencies=len(_mapping(data.get("dependencies"))),
        dev_dependencies=len(_mapping(data.get("devDependencies"))),
        peer_dependencies=len(_mapping(data.get("peerDependencies"))),
        has_source_maps=publish_config.get("sourcemap") is True,
        side_effects=side_effects,
        files=tuple(str(f) for f in files),
    )


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any):
    if value is None or value == "":
        return None
    return str(value)
