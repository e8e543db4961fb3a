"""Dependency tree resolution.

A generator's dependencies are expanded depth-first into a flat list,
dependencies before the generators that need them:

    controller -> model -> migration

resolves to `[migration, model, controller]`. A generator reached through a
dependency edge is a copy carrying that edge's `name`, `parentPath` and
`method` overrides on each of its files.
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import DependencyCycleError, InvalidGeneratorError
from .models import GeneratorDependency, NormalizedGenerator


def find_generator(
    generators: Sequence[NormalizedGenerator], generator_type: str
) -> NormalizedGenerator:
    """Return the one generator with the given type.

    Raises:
        InvalidGeneratorError: If no generator, or more than one, matches.
    """
    matches = [g for g in generators if g.type == generator_type]
    if not matches:
        raise InvalidGeneratorError(generator_type)
    if len(matches) > 1:
        raise InvalidGeneratorError(generator_type, "declared more than once")
    return matches[0]


def apply_overrides(
    generator: NormalizedGenerator, dependency: GeneratorDependency
) -> NormalizedGenerator:
    """Copy a generator with an edge's overrides applied to every file.

    Only fields the edge specifies are overridden.
    """
    update = {}
    if dependency.parent_path is not None:
        update["parent_path"] = dependency.parent_path
    if dependency.name is not None:
        update["name"] = dependency.name
    if dependency.method is not None:
        update["method"] = dependency.method

    if not update:
        return generator

    files = tuple(f.model_copy(update=update) for f in generator.files)
    return generator.model_copy(update={"files": files})


def _resolve(
    generators: Sequence[NormalizedGenerator],
    generator_type: str,
    edge: GeneratorDependency | None,
    tree: list[NormalizedGenerator],
    chain: list[str],
) -> None:
    if generator_type in chain:
        raise DependencyCycleError(chain[chain.index(generator_type) :] + [generator_type])

    generator = find_generator(generators, generator_type)
    if edge is not None:
        generator = apply_overrides(generator, edge)

    chain.append(generator_type)
    for dependency in generator.dependencies:
        _resolve(generators, dependency.type, dependency, tree, chain)
    chain.pop()

    tree.append(generator)


def resolve_tree(
    generators: Sequence[NormalizedGenerator], root_type: str
) -> list[NormalizedGenerator]:
    """Flatten the dependency tree of `root_type`, dependencies first.

    Args:
        generators: All normalized generators of the generators root.
        root_type: The requested generator type.

    Returns:
        Generator snapshots in execution order, root last.

    Raises:
        InvalidGeneratorError: If a type in the tree is unknown.
        DependencyCycleError: If the dependencies form a cycle.
    """
    tree: list[NormalizedGenerator] = []
    _resolve(generators, root_type, None, tree, [])
    return tree
