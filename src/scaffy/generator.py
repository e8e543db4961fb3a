"""Scaffolding orchestration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from .discovery import load_manifests
from .errors import GeneratorsPathError
from .models import (
    FileResult,
    GeneratorInfo,
    NormalizedGenerator,
    PlannedOperation,
    TemplateData,
    default_generators_path,
)
from .normalizer import normalize_generator
from .operations import FileOperationEngine
from .templates import Renderer
from .tree import resolve_tree


class Scaffolder:
    """Runs generators found under one generators root.

    This class encapsulates the whole workflow:
    1. Check the generators root and load every manifest
    2. Register helper modules on a renderer private to the invocation
    3. Normalize the manifests and resolve the requested dependency tree
    4. Apply (or revert) each generator's files, dependencies first

    Nothing is cached between calls; every call reloads the generators.

    Example:
        >>> from scaffy.generator import Scaffolder
        >>>
        >>> scaffolder = Scaffolder("generators")
        >>> results = scaffolder.generate("controller", "widget")
        >>> [r.generator for r in results]
        ['model', 'controller']
    """

    def __init__(self, generators_path: Path | str | None = None):
        """Initialize the scaffolder.

        Args:
            generators_path: Path to the generators root. Defaults to
                `$SCAFFY_GENERATORS_PATH`, then `generators`.
        """
        if generators_path is None:
            generators_path = default_generators_path()
        self.generators_path = Path(generators_path)
        self._log = logging.getLogger("scaffy")

    def check_generators_path(self) -> Path:
        """Ensure the generators root exists.

        Raises:
            GeneratorsPathError: If it is missing or not a directory.
        """
        if not self.generators_path.is_dir():
            raise GeneratorsPathError(self.generators_path)
        return self.generators_path

    def load(
        self, template_data: TemplateData
    ) -> tuple[list[NormalizedGenerator], Renderer]:
        """Load and normalize every generator of the root.

        Returns:
            Tuple of (normalized generators, renderer with their helpers).
        """
        self.check_generators_path()
        manifests = load_manifests(self.generators_path)
        self._log.debug(f"Found generators: {', '.join(manifests)}")

        renderer = Renderer()
        for manifest in manifests.values():
            if manifest.helpers is not None:
                renderer.load_helpers(manifest.helpers)

        generators = [
            normalize_generator(
                self.generators_path / generator_type, manifest, template_data, renderer
            )
            for generator_type, manifest in manifests.items()
        ]
        return generators, renderer

    def resolve(
        self, generator_type: str, template_data: TemplateData
    ) -> tuple[list[NormalizedGenerator], Renderer]:
        """Resolve the dependency tree of a generator, dependencies first."""
        generators, renderer = self.load(template_data)
        return resolve_tree(generators, generator_type), renderer

    async def generate_async(
        self,
        generator_type: str,
        name: str,
        plural_name: str | None = None,
        parent_path: str | None = None,
        revert: bool = False,
    ) -> list[FileResult]:
        """Apply (or revert) a generator and its dependencies.

        Generators run one after another in tree order; the files of one
        generator are processed concurrently.

        Args:
            generator_type: Type of the requested generator.
            name: Name of the entity to scaffold.
            plural_name: Plural of `name`. Derived from `name` if omitted.
            parent_path: Directory overriding every file's default directory.
            revert: Undo the generator instead of applying it.

        Returns:
            Results of every file operation, in tree order.

        Raises:
            ConfigurationError: Before any file is touched, if the generators
                setup is unusable.
            FileOperationError: If a file operation fails.
        """
        template_data = TemplateData.for_name(name, plural_name, parent_path)
        tree, renderer = self.resolve(generator_type, template_data)
        engine = FileOperationEngine(renderer)

        results: list[FileResult] = []
        for generator in tree:
            self._log.debug(
                f"{'Reverting' if revert else 'Applying'} generator '{generator.type}'"
            )
            results.extend(await engine.apply_generator(generator, template_data, revert))
        return results

    def generate(
        self,
        generator_type: str,
        name: str,
        plural_name: str | None = None,
        parent_path: str | None = None,
        revert: bool = False,
    ) -> list[FileResult]:
        """Synchronous `generate_async`. Must not be called from a running
        event loop."""
        return asyncio.run(
            self.generate_async(generator_type, name, plural_name, parent_path, revert)
        )

    def list_generators(self) -> list[GeneratorInfo]:
        """List the generators of the root with their descriptions."""
        self.check_generators_path()
        return [
            GeneratorInfo(type=generator_type, description=manifest.description)
            for generator_type, manifest in load_manifests(self.generators_path).items()
        ]

    def describe(
        self,
        generator_type: str,
        name: str,
        plural_name: str | None = None,
        parent_path: str | None = None,
        revert: bool = False,
    ) -> list[tuple[NormalizedGenerator, list[PlannedOperation]]]:
        """Plan a generator without touching the filesystem.

        Returns:
            (generator, planned operations) pairs, root first.
        """
        template_data = TemplateData.for_name(name, plural_name, parent_path)
        tree, renderer = self.resolve(generator_type, template_data)
        engine = FileOperationEngine(renderer)
        return [
            (generator, engine.plan(generator, template_data, revert))
            for generator in reversed(tree)
        ]

    def help(
        self,
        generator_type: str,
        name: str = "name",
        plural_name: str | None = None,
        parent_path: str | None = None,
        revert: bool = False,
        echo: Callable[[str], None] = print,
    ) -> None:
        """Print what a generator would do."""
        for generator, planned in self.describe(
            generator_type, name, plural_name, parent_path, revert
        ):
            if generator.description:
                echo(f"{generator.type}: {generator.description}")
            else:
                echo(generator.type)
            for operation in planned:
                echo(f"  {operation.method} {operation.destination.as_posix()}")
