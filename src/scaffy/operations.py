"""File operations applied by generators, and their inverses.

| method      | forward                     | revert                          |
|-------------|-----------------------------|---------------------------------|
| `create`    | write unless the file exists| delete                          |
| `overwrite` | write, replacing content    | delete                          |
| `append`    | append to the end           | remove first verbatim occurrence|

The blocking primitives are plain functions. `FileOperationEngine` renders
paths and contents and runs the primitives in worker threads, fanning out over
the files of one generator.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import FileOperationError
from .models import (
    FileAction,
    FileMethod,
    FileResult,
    GeneratorFile,
    NormalizedGenerator,
    PlannedOperation,
    TemplateData,
)
from .templates import Renderer

# rwxr-xr-x
DIRECTORY_MODE = 0o755

REVERT_METHODS = {
    FileMethod.CREATE: "delete",
    FileMethod.OVERWRITE: "delete",
    FileMethod.APPEND: "remove-appended",
}


@contextmanager
def _file_operation(operation: str, path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as e:
        logging.getLogger("scaffy").error(f"Failed to {operation} {path}: {e}")
        raise FileOperationError(operation, path, e) from e


def ensure_parent_dir(path: Path) -> None:
    """Create the parent directories of `path` if they are missing."""
    parent = Path(path).parent
    if parent.exists():
        return
    logging.getLogger("scaffy").info(f"init {parent}")
    with _file_operation("create directory", parent):
        parent.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)


def create_file(path: Path, content: bytes) -> FileAction:
    """Write a new file. An existing file is left untouched."""
    log = logging.getLogger("scaffy")

    path = Path(path)
    if path.exists():
        log.info(f"skipping {path} (already exists)")
        return FileAction.SKIPPED

    ensure_parent_dir(path)
    with _file_operation("create", path):
        try:
            with open(path, "xb") as f:
                f.write(content)
        except FileExistsError:
            log.info(f"skipping {path} (already exists)")
            return FileAction.SKIPPED

    log.info(f"create {path}")
    return FileAction.CREATED


def overwrite_file(path: Path, content: bytes) -> FileAction:
    """Write a file, replacing any existing content."""
    path = Path(path)
    ensure_parent_dir(path)
    with _file_operation("overwrite", path):
        path.write_bytes(content)

    logging.getLogger("scaffy").info(f"overwrite {path}")
    return FileAction.OVERWRITTEN


def append_file(path: Path, content: bytes) -> FileAction:
    """Append to the end of a file, creating it if absent."""
    path = Path(path)
    ensure_parent_dir(path)
    with _file_operation("append", path):
        with open(path, "ab") as f:
            f.write(content)

    logging.getLogger("scaffy").info(f"append {path}")
    return FileAction.APPENDED


def destroy_file(path: Path) -> FileAction:
    """Delete a file. A missing file is logged and reported, not raised."""
    log = logging.getLogger("scaffy")

    path = Path(path)
    with _file_operation("destroy", path):
        try:
            path.unlink()
        except FileNotFoundError as e:
            log.error(f"Cannot destroy {path}: {e.strerror}")
            return FileAction.MISSING

    log.info(f"destroy {path}")
    return FileAction.DESTROYED


def unappend_file(path: Path, content: bytes) -> FileAction:
    """Remove the first verbatim occurrence of `content` from a file.

    Content that no longer appears verbatim is left alone. A file emptied
    this way is kept, even if the append created it.
    """
    log = logging.getLogger("scaffy")

    path = Path(path)
    with _file_operation("unappend", path):
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            log.error(f"Cannot unappend {path}: {e.strerror}")
            return FileAction.MISSING

        if not content or content not in data:
            log.info(f"skipping {path} (appended content not found)")
            return FileAction.SKIPPED

        path.write_bytes(data.replace(content, b"", 1))

    log.info(f"unappend {path}")
    return FileAction.UNAPPENDED


class FileOperationEngine:
    """Applies (or reverts) the files of normalized generators."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer
        self._log = logging.getLogger("scaffy")

    def _render(self, template: str, data: TemplateData) -> str:
        result = self.renderer.try_render(template, data)
        if not result.rendered:
            self._log.warning(f"Could not render '{template}': {result.error}")
        return result.text

    def file_data(self, file: GeneratorFile, template_data: TemplateData) -> TemplateData:
        """Template data in effect for one file.

        A name override replaces `name` and recomputes `pluralName`.
        `parentPath` is the file's rendered directory.
        """
        if file.name is not None:
            data = TemplateData.for_name(file.name)
        else:
            data = template_data
        parent_path = self._render(file.parent_path, data) if file.parent_path else None
        return data.model_copy(update={"parent_path": parent_path})

    def destination(
        self, file: GeneratorFile, template_data: TemplateData
    ) -> tuple[Path, TemplateData]:
        """Render a file's destination path.

        Returns:
            Tuple of (destination, effective template data).
        """
        data = self.file_data(file, template_data)
        destination = self._render(os.path.join(file.parent_path, file.base), data)
        return Path(destination), data

    async def render_source(self, source: Path, data: TemplateData) -> bytes:
        """Read a source template and render it.

        Sources that are not UTF-8 text, or fail to render, are used raw.
        """
        with _file_operation("read", source):
            raw = await asyncio.to_thread(source.read_bytes)

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            self._log.debug(f"{source} is not UTF-8 text, copying verbatim")
            return raw

        result = self.renderer.try_render(text, data)
        if not result.rendered:
            self._log.warning(f"Could not render {source}, using raw content: {result.error}")
            return raw
        return result.text.encode("utf-8")

    async def apply_file(
        self,
        generator_type: str,
        file: GeneratorFile,
        template_data: TemplateData,
        revert: bool = False,
    ) -> FileResult:
        """Apply (or revert) a single file entry."""
        destination, data = self.destination(file, template_data)

        if revert and file.method != FileMethod.APPEND:
            action = await asyncio.to_thread(destroy_file, destination)
        else:
            content = await self.render_source(file.source, data)
            if revert:
                action = await asyncio.to_thread(unappend_file, destination, content)
            elif file.method == FileMethod.CREATE:
                action = await asyncio.to_thread(create_file, destination, content)
            elif file.method == FileMethod.OVERWRITE:
                action = await asyncio.to_thread(overwrite_file, destination, content)
            else:
                action = await asyncio.to_thread(append_file, destination, content)

        return FileResult(generator=generator_type, path=destination, action=action)

    async def apply_generator(
        self,
        generator: NormalizedGenerator,
        template_data: TemplateData,
        revert: bool = False,
    ) -> list[FileResult]:
        """Apply every file of a generator concurrently.

        The first failure propagates. Sibling operations already started are
        neither awaited further nor rolled back.
        """
        results = await asyncio.gather(
            *(
                self.apply_file(generator.type, file, template_data, revert)
                for file in generator.files
            )
        )
        return list(results)

    def plan(
        self,
        generator: NormalizedGenerator,
        template_data: TemplateData,
        revert: bool = False,
    ) -> list[PlannedOperation]:
        """Describe what `apply_generator` would do, without touching files."""
        planned = []
        for file in generator.files:
            destination, _ = self.destination(file, template_data)
            method = REVERT_METHODS[file.method] if revert else str(file.method)
            planned.append(
                PlannedOperation(
                    generator=generator.type, method=method, destination=destination
                )
            )
        return planned
