"""scaffy - File scaffolding from generator recipes.

A generator is a directory holding a `generator.json` manifest and template
files. Generating one renders its templates into files, after first
generating the generators it depends on.

Example usage:
    >>> from scaffy import Scaffolder, generate
    >>>
    >>> # Create app/controllers/widget_controller.js and its dependencies
    >>> results = generate("controller", "widget", {"generatorsPath": "generators"})
    >>>
    >>> # Undo it again
    >>> Scaffolder("generators").generate("controller", "widget", revert=True)
"""

from .core import describe, destroy, generate, generate_async, help_generator, list_generators
from .discovery import discover_generators, load_manifest, load_manifests
from .errors import (
    ConfigurationError,
    DependencyCycleError,
    FileOperationError,
    GeneratorsPathError,
    HelperError,
    InvalidGeneratorError,
    LoadError,
    ScaffoldError,
)
from .generator import Scaffolder
from .models import (
    FileAction,
    FileMethod,
    FileResult,
    GeneratorInfo,
    GeneratorManifest,
    NormalizedGenerator,
    PlannedOperation,
    ScaffoldOptions,
    TemplateData,
)
from .normalizer import normalize_generator
from .operations import FileOperationEngine
from .templates import Renderer, RenderResult, camelize
from .tree import resolve_tree

__all__ = [
    # Entry points
    "Scaffolder",
    "generate",
    "generate_async",
    "destroy",
    "list_generators",
    "describe",
    "help_generator",
    # Pipeline
    "discover_generators",
    "load_manifest",
    "load_manifests",
    "normalize_generator",
    "resolve_tree",
    "FileOperationEngine",
    "Renderer",
    "RenderResult",
    "camelize",
    # Models
    "FileAction",
    "FileMethod",
    "FileResult",
    "GeneratorInfo",
    "GeneratorManifest",
    "NormalizedGenerator",
    "PlannedOperation",
    "ScaffoldOptions",
    "TemplateData",
    # Errors
    "ScaffoldError",
    "ConfigurationError",
    "GeneratorsPathError",
    "LoadError",
    "HelperError",
    "InvalidGeneratorError",
    "DependencyCycleError",
    "FileOperationError",
]
