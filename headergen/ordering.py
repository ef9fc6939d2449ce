"""Deterministic dependency ordering for structures.

C requires a struct embedded by value to be complete before the struct that
embeds it. Each struct gets a nesting depth (the longest chain of
struct-typed members below it) and structs are emitted shallowest first,
alphabetically within a depth.

Example
-------
::

    from headergen.ordering import sorted_structures

    for name in sorted_structures(schema.types.structs):
        print(name)
"""

from collections.abc import (
    Mapping,
)

from headergen.ir import (
    Struct,
)
from headergen.types import (
    Reference,
)


class StructCycleError(ValueError):
    """Raised when structs embed each other by value in a cycle."""

    def __init__(self, path: list[str]) -> None:
        super().__init__(f"Struct membership cycle: {' -> '.join(path)}")
        self.path = path


def _compute_depth(
    name: str,
    structs: Mapping[str, Struct],
    depths: dict[str, int],
    in_progress: list[str],
) -> int:
    if name in depths:
        return depths[name]
    if name in in_progress:
        cycle = in_progress[in_progress.index(name) :] + [name]
        raise StructCycleError(cycle)

    in_progress.append(name)
    depth = 0
    for member in structs[name].members:
        if isinstance(member.type, Reference) and member.type.name in structs:
            depth = max(depth, _compute_depth(member.type.name, structs, depths, in_progress) + 1)
    in_progress.pop()

    depths[name] = depth
    return depth


def struct_depths(structs: Mapping[str, Struct]) -> dict[str, int]:
    """Compute the nesting depth of every struct.

    A struct with no struct-typed members has depth 0; otherwise its depth is
    one more than the deepest struct it embeds. Results are memoized by name
    since most structs are shared by many others.

    :param structs: Struct name to :class:`~headergen.ir.Struct`.
    :returns: Struct name to depth.
    :raises StructCycleError: If a struct embeds itself, directly or transitively.
    """
    depths: dict[str, int] = {}
    for name in structs:
        _compute_depth(name, structs, depths, [])
    return depths


def sorted_structures(structs: Mapping[str, Struct]) -> list[str]:
    """Order struct names so that no struct precedes a struct it embeds.

    Names are sorted alphabetically first, then re-sorted by
    ``(depth, alphabetical index)``, giving alphabetical order within each
    depth tier. The result does not depend on the mapping's order.

    :param structs: Struct name to :class:`~headergen.ir.Struct`.
    :returns: Struct names in emission order.
    """
    depths = struct_depths(structs)
    alphabetical = sorted(structs)
    return [
        name for _, name in sorted(enumerate(alphabetical), key=lambda item: (depths[item[1]], item[0]))
    ]
