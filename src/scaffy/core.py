"""Module-level entry points taking an options mapping.

`options` is a `ScaffoldOptions` or a mapping with any of the keys
`pluralName`, `generatorsPath`, `revert` and `parentPath`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .generator import Scaffolder
from .models import (
    FileResult,
    GeneratorInfo,
    NormalizedGenerator,
    PlannedOperation,
    ScaffoldOptions,
)

Options = ScaffoldOptions | dict[str, Any] | None


async def generate_async(
    generator_type: str, name: str, options: Options = None
) -> list[FileResult]:
    """Apply a generator from inside a running event loop."""
    opts = ScaffoldOptions.coerce(options)
    scaffolder = Scaffolder(opts.generators_path)
    return await scaffolder.generate_async(
        generator_type, name, opts.plural_name, opts.parent_path, opts.revert
    )


def generate(generator_type: str, name: str, options: Options = None) -> list[FileResult]:
    """Apply (or, with `revert`, undo) a generator and its dependencies.

    Args:
        generator_type: Type of the requested generator.
        name: Name of the entity to scaffold.
        options: Invocation options.

    Returns:
        Results of every file operation.

    Raises:
        ScaffoldError: On configuration or file operation failures.
    """
    opts = ScaffoldOptions.coerce(options)
    return Scaffolder(opts.generators_path).generate(
        generator_type, name, opts.plural_name, opts.parent_path, opts.revert
    )


def destroy(generator_type: str, name: str, options: Options = None) -> list[FileResult]:
    """Undo a generator and its dependencies."""
    opts = ScaffoldOptions.coerce(options).model_copy(update={"revert": True})
    return generate(generator_type, name, opts)


def list_generators(options: Options = None) -> list[GeneratorInfo]:
    """List the available generators with their descriptions."""
    opts = ScaffoldOptions.coerce(options)
    return Scaffolder(opts.generators_path).list_generators()


def describe(
    generator_type: str, name: str = "name", options: Options = None
) -> list[tuple[NormalizedGenerator, list[PlannedOperation]]]:
    """Plan a generator without applying it."""
    opts = ScaffoldOptions.coerce(options)
    return Scaffolder(opts.generators_path).describe(
        generator_type, name, opts.plural_name, opts.parent_path, opts.revert
    )


def help_generator(
    generator_type: str,
    name: str = "name",
    options: Options = None,
    echo: Callable[[str], None] = print,
) -> None:
    """Print what a generator would do, root first."""
    opts = ScaffoldOptions.coerce(options)
    Scaffolder(opts.generators_path).help(
        generator_type, name, opts.plural_name, opts.parent_path, opts.revert, echo
    )
