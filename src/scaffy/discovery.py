"""Generator discovery and manifest loading.

A generators root is a directory whose immediate subdirectories are
generators. Each generator directory holds a manifest and the template
files the manifest refers to:

    generators/
        controller/
            generator.json
            controller.js.j2
            helpers.py          (optional)

The directory name is the generator type.

Example:
    ```python
    from scaffy.discovery import discover_generators, load_manifest

    for generator_type in discover_generators("generators"):
        manifest = load_manifest("generators", generator_type)
        print(generator_type, manifest.description)
    ```
"""

from __future__ import annotations

import json
import logging
import os
import stat
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import LoadError
from .models import GeneratorManifest

# Manifest filenames, in order of preference
MANIFEST_FILENAMES = ("generator.json", "generator.yml", "generator.yaml")

HELPERS_FILENAME = "helpers.py"


def _is_directory(path: Path) -> bool:
    log = logging.getLogger("scaffy")
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError as e:
        log.error(f"Cannot stat {path}: {e}")
        return False


def discover_generators(generators_path: Path | str) -> list[str]:
    """List the generator types available under a generators root.

    Args:
        generators_path: Path to the generators root.

    Returns:
        Sorted names of the immediate subdirectories.
    """
    root = Path(generators_path)
    return sorted(item.name for item in root.iterdir() if _is_directory(item))


def find_manifest(generator_dir: Path) -> Path | None:
    """Return the manifest path inside a generator directory, if any."""
    for filename in MANIFEST_FILENAMES:
        candidate = generator_dir / filename
        if candidate.is_file():
            return candidate
    return None


def _parse_manifest(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_manifest(generators_path: Path | str, generator_type: str) -> GeneratorManifest:
    """Read and validate a generator's manifest.

    Sets the manifest's `type` from the directory name and records a
    `helpers.py` found next to the manifest.

    Args:
        generators_path: Path to the generators root.
        generator_type: Name of the generator directory.

    Returns:
        The validated manifest.

    Raises:
        LoadError: If the manifest is missing, unparseable or invalid.
    """
    log = logging.getLogger("scaffy")

    generator_dir = Path(generators_path) / generator_type
    manifest_path = find_manifest(generator_dir)
    if manifest_path is None:
        raise LoadError(f"No generator.json found in {generator_dir}")

    log.debug(f"Loading manifest {manifest_path.as_posix()}")
    try:
        data = _parse_manifest(manifest_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise LoadError(f"Failed to parse {manifest_path}: {e}") from e

    if not isinstance(data, dict):
        raise LoadError(f"Manifest {manifest_path} must contain an object")

    try:
        manifest = GeneratorManifest.model_validate(data)
    except ValidationError as e:
        raise LoadError(f"Invalid manifest {manifest_path}: {e}") from e

    manifest.type = generator_type

    if manifest.helpers is not None:
        manifest.helpers = generator_dir / manifest.helpers
        if not manifest.helpers.is_file():
            raise LoadError(f"Helpers module {manifest.helpers} does not exist")
    elif (generator_dir / HELPERS_FILENAME).is_file():
        manifest.helpers = generator_dir / HELPERS_FILENAME

    return manifest


def load_manifests(generators_path: Path | str) -> dict[str, GeneratorManifest]:
    """Load every generator manifest under a generators root."""
    return {
        generator_type: load_manifest(generators_path, generator_type)
        for generator_type in discover_generators(generators_path)
    }
