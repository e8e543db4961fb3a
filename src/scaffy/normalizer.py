"""Conversion of authored manifests into frozen, canonical generators."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import (
    FileMethod,
    GeneratorDependency,
    GeneratorFile,
    GeneratorManifest,
    ManifestDependency,
    ManifestFile,
    NormalizedGenerator,
    TemplateData,
)
from .templates import Renderer


def native_path(path: str) -> str:
    """Convert a manifest path (always `/`-separated) to the platform form."""
    if os.sep == "\\":
        return path.replace("/", "\\")
    return path


def normalize_file(
    base_path: Path, entry: ManifestFile, template_data: TemplateData
) -> GeneratorFile:
    """Normalize one `files` entry.

    The destination file name and directory stay templates here, so that a
    dependency edge overriding `name` still changes the rendered paths.
    """
    to = native_path(entry.to)
    return GeneratorFile(
        method=entry.method or FileMethod.CREATE,
        base=os.path.basename(to),
        source=Path(base_path) / native_path(entry.source),
        parent_path=template_data.parent_path or os.path.dirname(to),
    )


def _render_field(renderer: Renderer, template: str, data: TemplateData) -> str:
    result = renderer.try_render(template, data)
    if not result.rendered:
        logging.getLogger("scaffy").warning(
            f"Could not render '{template}': {result.error}"
        )
    return result.text


def normalize_dependency(
    generator_type: str,
    entry: ManifestDependency,
    data: TemplateData,
    renderer: Renderer,
) -> GeneratorDependency:
    """Normalize one `dependencies` entry, rendering its override fields.

    `data.parent_path` is the parent generator's resolved directory.
    """
    log = logging.getLogger("scaffy")

    if entry.type:
        dependency_type, name = entry.type, entry.name
    else:
        # Legacy form: `name` is the dependency type, with no name override
        dependency_type, name = entry.name or "", None

    parent_path = entry.parent_path
    if parent_path is not None and "parentPath" in parent_path and not data.parent_path:
        log.warning(
            f"Generator '{generator_type}' has no parentPath for dependency "
            f"'{dependency_type}'; its files will use their own defaults"
        )
        parent_path = None
    if parent_path is not None:
        parent_path = _render_field(renderer, native_path(parent_path), data)
    if name is not None:
        name = _render_field(renderer, name, data)

    return GeneratorDependency(
        type=_render_field(renderer, dependency_type, data),
        name=name,
        parent_path=parent_path,
        method=entry.method,
    )


def normalize_generator(
    base_path: Path | str,
    manifest: GeneratorManifest,
    template_data: TemplateData,
    renderer: Renderer,
) -> NormalizedGenerator:
    """Convert a manifest into its canonical, immutable form.

    Args:
        base_path: The generator's directory. `from` paths are relative to it.
        manifest: The loaded manifest.
        template_data: Data for the invocation.
        renderer: Renderer used for the dependency override fields.

    Returns:
        The normalized generator.
    """
    base_path = Path(base_path)
    files = tuple(
        normalize_file(base_path, entry, template_data) for entry in manifest.files
    )

    # The generator's own directory, exposed to its dependencies as parentPath
    own_parent = files[0].parent_path if files else template_data.parent_path
    if own_parent:
        own_parent = _render_field(renderer, own_parent, template_data)
    dependency_data = template_data.model_copy(update={"parent_path": own_parent or None})

    dependencies = tuple(
        normalize_dependency(manifest.type, entry, dependency_data, renderer)
        for entry in manifest.dependencies
    )

    return NormalizedGenerator(
        type=manifest.type,
        description=manifest.description,
        path=base_path,
        files=files,
        dependencies=dependencies,
    )
