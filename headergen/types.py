"""Type reference classification and formatting.

Every type string in the schema is either a C primitive, rendered verbatim,
or the name of a schema entity, rendered with the API prefix. The schema
marks entity names by an upper-case first character.

Example
-------
::

    from headergen.types import Primitive, Reference, resolve_type

    assert resolve_type("uint32_t") == Primitive("uint32_t")
    assert resolve_type("BufferUsage") == Reference("BufferUsage")
"""

from __future__ import (
    annotations,
)

from dataclasses import (
    dataclass,
)
from typing import (
    TYPE_CHECKING,
    Optional,
    Union,
)

if TYPE_CHECKING:
    from headergen.ir import (
        TypeTable,
    )
    from headergen.naming import (
        NamingPolicy,
    )

# Primitive types that map onto schema value types
PRIMITIVE_SUBSTITUTIONS = {
    "bool": "Bool",
}


@dataclass(frozen=True)
class Primitive:
    """A C type passed through verbatim (``uint32_t``, ``char const *``)."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Reference:
    """A reference to a named schema entity (enum, bitmask, struct, object, value)."""

    name: str

    def __str__(self) -> str:
        return self.name


TypeRef = Union[Primitive, Reference]


def resolve_type(value: Union[str, TypeRef, None]) -> Optional[TypeRef]:
    """Classify a schema type string.

    :param value: Type text from the schema, an already resolved reference,
        or None.
    :returns: None for absent types, otherwise a :class:`Reference` when the
        first character is upper case and a :class:`Primitive` otherwise.
    """
    if value is None:
        return None
    if isinstance(value, (Primitive, Reference)):
        return value
    if value and value[0] == value[0].upper():
        return Reference(value)
    return Primitive(value)


class TypeResolver:
    """Formats resolved type references for a specific schema.

    :param types: The schema's type table, used to tell structs and bitmasks apart.
    :param naming: Naming policy supplying the prefix.
    """

    def __init__(self, types: TypeTable, naming: NamingPolicy) -> None:
        self.types = types
        self.naming = naming

    def is_struct(self, ref: Optional[TypeRef]) -> bool:
        return isinstance(ref, Reference) and ref.name in self.types.structs

    def is_bitmask(self, ref: Optional[TypeRef]) -> bool:
        return isinstance(ref, Reference) and ref.name in self.types.bitmasks

    def format(self, ref: Union[str, TypeRef, None]) -> str:
        """Render a type reference as C text.

        Bitmask references render as their ``Flags`` companion type, and the
        ``bool`` primitive renders as the schema's own boolean value type.
        """
        ref = resolve_type(ref)
        if ref is None:
            return "void"
        if isinstance(ref, Primitive):
            if ref.text not in PRIMITIVE_SUBSTITUTIONS:
                return ref.text
            ref = Reference(PRIMITIVE_SUBSTITUTIONS[ref.text])

        suffix = "Flags" if self.is_bitmask(ref) else ""
        return f"{self.naming.type_name(ref.name)}{suffix}"
