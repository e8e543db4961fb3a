"""Exceptions raised by scaffy."""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for every error scaffy raises."""


class ConfigurationError(ScaffoldError):
    """The generators setup is unusable. Raised before any file is touched."""


class GeneratorsPathError(ConfigurationError):
    """The generators root does not exist or is not a directory."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Generators directory {self.path} does not exist")


class LoadError(ConfigurationError):
    """A generator manifest is missing, unreadable or invalid."""


class HelperError(ConfigurationError):
    """A generator helper module could not be loaded or registered."""


class InvalidGeneratorError(ConfigurationError):
    """A requested generator type is unknown or ambiguous."""

    def __init__(self, generator_type: str, reason: str = "not found"):
        self.generator_type = generator_type
        super().__init__(f"Invalid generator {generator_type} ({reason})")


class DependencyCycleError(ConfigurationError):
    """Generator dependencies form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Dependency cycle: {' -> '.join(cycle)}")


class FileOperationError(ScaffoldError):
    """A single file operation failed."""

    def __init__(self, operation: str, path: Path | str, error: OSError):
        self.operation = operation
        self.path = Path(path)
        self.error = error
        super().__init__(f"Failed to {operation} {self.path}: {error}")
