import json
from pathlib import Path

from pydantic import ValidationError

from ..config import MANIFEST_FILE
from ..domain.errors import ManifestError
from ..domain.models import PackageDescriptor


def read_descriptor(project_dir: Path, manifest_name: str = MANIFEST_FILE) -> PackageDescriptor:
    """
    read name, version and description from the project's manifest.

    args:
        project_dir: directory holding the manifest (usually the cwd)
        manifest_name: manifest file name

    raises:
        ManifestError: if the manifest is missing, unreadable or incomplete
    """
    manifest_path = project_dir / manifest_name
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ManifestError(f"No `{manifest_name}` found in {project_dir}.")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Could not read `{manifest_name}`: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"`{manifest_name}` must contain a JSON object.")

    # validate required fields
    for field in ("name", "version"):
        if not data.get(field):
            raise ManifestError(f"`{manifest_name}` must include '{field}'.")

    try:
        return PackageDescriptor(
            name=data["name"],
            version=data["version"],
            description=data.get("description"),
        )
    except ValidationError as e:
        raise ManifestError(f"Invalid `{manifest_name}`: {e}") from e
