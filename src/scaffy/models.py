"""Data models shared across the scaffolding pipeline.

Two families of models live here:

- *Authored* models (`GeneratorManifest` and its entries) mirror the on-disk
  `generator.json` schema, including its camelCase keys.
- *Derived* models (`NormalizedGenerator`, `TemplateData`, results) are frozen.
  Nothing mutates them after construction; per-dependency overrides produce
  new copies via `model_copy`.
"""

from __future__ import annotations

import os
from enum import StrEnum
from pathlib import Path
from typing import Any

import inflection
from pydantic import BaseModel, ConfigDict, Field, model_validator

# Environment variable overriding the default generators root
GENERATORS_PATH_ENV = "SCAFFY_GENERATORS_PATH"

DEFAULT_GENERATORS_PATH = "generators"


class FileMethod(StrEnum):
    """How rendered content is applied to a destination."""

    CREATE = "create"
    OVERWRITE = "overwrite"
    APPEND = "append"


class FileAction(StrEnum):
    """What actually happened to a destination file."""

    CREATED = "created"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"
    APPENDED = "appended"
    DESTROYED = "destroyed"
    UNAPPENDED = "unappended"
    MISSING = "missing"


# =============================================================================
# Authored manifest
# =============================================================================


class ManifestFile(BaseModel):
    """A `files` entry as written in the manifest."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    to: str
    method: FileMethod | None = None


class ManifestDependency(BaseModel):
    """A `dependencies` entry as written in the manifest.

    Older manifests name the dependency with `name` instead of `type`.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    name: str | None = None
    parent_path: str | None = Field(default=None, alias="parentPath")
    method: FileMethod | None = None

    @model_validator(mode="after")
    def check_type(self) -> "ManifestDependency":
        if not self.type and not self.name:
            raise ValueError("dependency needs a 'type' (or legacy 'name')")
        return self


class GeneratorManifest(BaseModel):
    """A generator definition as loaded from disk."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = ""
    description: str | None = None
    files: list[ManifestFile]
    dependencies: list[ManifestDependency] = Field(default_factory=list)
    helpers: Path | None = None


# =============================================================================
# Derived, frozen models
# =============================================================================


class TemplateData(BaseModel):
    """Substitution context for path and content templates."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    plural_name: str = Field(alias="pluralName")
    parent_path: str | None = Field(default=None, alias="parentPath")

    @classmethod
    def for_name(
        cls,
        name: str,
        plural_name: str | None = None,
        parent_path: str | None = None,
    ) -> "TemplateData":
        """Build template data, pluralizing `name` unless a plural is given."""
        if plural_name is None:
            plural_name = inflection.pluralize(name)
        return cls(name=name, plural_name=plural_name, parent_path=parent_path)

    def context(self) -> dict[str, Any]:
        """Return the mapping templates see, using the authored key names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GeneratorFile(BaseModel):
    """A normalized file entry.

    `base` and `parent_path` are still templates; they are rendered when the
    file operation runs, against the data in effect for that file.
    """

    model_config = ConfigDict(frozen=True)

    method: FileMethod = FileMethod.CREATE
    base: str
    source: Path
    parent_path: str
    name: str | None = None


class GeneratorDependency(BaseModel):
    """A normalized dependency edge. `None` fields are not overridden."""

    model_config = ConfigDict(frozen=True)

    type: str
    name: str | None = None
    parent_path: str | None = None
    method: FileMethod | None = None


class NormalizedGenerator(BaseModel):
    """Canonical, immutable form of a generator."""

    model_config = ConfigDict(frozen=True)

    type: str
    description: str | None = None
    path: Path
    files: tuple[GeneratorFile, ...] = ()
    dependencies: tuple[GeneratorDependency, ...] = ()


class GeneratorInfo(BaseModel):
    """A generator as reported by `list`."""

    model_config = ConfigDict(frozen=True)

    type: str
    description: str | None = None


class FileResult(BaseModel):
    """Outcome of one file operation."""

    model_config = ConfigDict(frozen=True)

    generator: str
    path: Path
    action: FileAction


class PlannedOperation(BaseModel):
    """A file operation that would be applied, as reported by `help`."""

    model_config = ConfigDict(frozen=True)

    generator: str
    method: str
    destination: Path


# =============================================================================
# Invocation options
# =============================================================================


def default_generators_path() -> Path:
    """Generators root from the environment, or the conventional default."""
    return Path(os.environ.get(GENERATORS_PATH_ENV, DEFAULT_GENERATORS_PATH))


class ScaffoldOptions(BaseModel):
    """Options recognised by `generate`, `list` and `help`."""

    model_config = ConfigDict(populate_by_name=True)

    plural_name: str | None = Field(default=None, alias="pluralName")
    generators_path: Path = Field(
        default_factory=default_generators_path, alias="generatorsPath"
    )
    revert: bool = False
    parent_path: str | None = Field(default=None, alias="parentPath")

    @classmethod
    def coerce(
        cls, options: "ScaffoldOptions | dict[str, Any] | None"
    ) -> "ScaffoldOptions":
        """Accept an options model, a plain mapping, or nothing."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(options)

    def template_data(self, name: str) -> TemplateData:
        return TemplateData.for_name(name, self.plural_name, self.parent_path)
