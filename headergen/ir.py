"""Intermediate Representation (IR) for WebGPU API schemas.

This module defines the typed records the loader produces from the XML
schema. The writer consumes this IR to generate the C header.

Design Principles
-----------------
* **Immutable**: Every record is a frozen dataclass, built once by the loader.
* **Resolved types**: Type references are already classified as
  :class:`~headergen.types.Primitive` or :class:`~headergen.types.Reference`.
* **Order preserving**: Enum values and struct members keep document order,
  which becomes declaration order in the header.

Declaration Types
-----------------
* :class:`Constant` - ``#define`` constant
* :class:`ValueType` - Scalar typedef (``WGPUBool``, ``WGPUFlags``)
* :class:`Enum` / :class:`Bitmask` - Enumerations with named values
* :class:`Struct` - Structure with members, methods and chaining info
* :class:`Function` - Free function, function pointer or method
* :class:`Object` - Opaque handle with methods

Example
-------
::

    from headergen.loader import parse_schema

    schema = parse_schema(xml_text)
    for name, struct in schema.types.structs.items():
        print(name, [m.name for m in struct.members])
"""

from __future__ import (
    annotations,
)

import enum
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Optional,
)

from headergen.types import (
    TypeRef,
)

# Sentinel literals replaced at load time
UINT64_MAX = "(0xffffffffffffffffULL)"
UINT32_MAX = "(0xffffffffUL)"

SENTINEL_VALUES = {
    "UINT64_MAX": UINT64_MAX,
    "UINT32_MAX": UINT32_MAX,
}


class Direction(enum.Enum):
    """Direction of structure extension or chaining."""

    IN = "in"
    OUT = "out"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional[Direction]:
        """Convert schema text (``in``/``out``, any case) to a direction.

        Absent or blank text gives None. Other text raises ValueError.
        """
        if text is None or not text.strip():
            return None
        return cls(text.strip().lower())


# =============================================================================
# Constants and scalar types
# =============================================================================


@dataclass(frozen=True)
class Constant:
    """A ``#define`` constant.

    :param name: Constant name without prefix.
    :param type: Resolved type of the constant.
    :param value: Literal text. The ``UINT64_MAX`` and ``UINT32_MAX`` tokens are
        already replaced by their numeric literals.

    Example
    -------
    ::

        Constant("WholeSize", Reference("Uint64"), UINT64_MAX)
    """

    name: str
    type: Optional[TypeRef]
    value: Optional[str]

    def __str__(self) -> str:
        return f"#define {self.name} {self.value}"


@dataclass(frozen=True)
class ValueType:
    """A scalar typedef such as ``WGPUBool``.

    :param name: Type name without prefix.
    :param type: Underlying C type text (e.g. ``"uint32_t"``).
    """

    name: str
    type: Optional[str]


@dataclass(frozen=True)
class NamedValue:
    """Single enum or bitmask member.

    :param name: Member name as written in the schema.
    :param value: Literal value text, stored verbatim.
    """

    name: str
    value: Optional[str]

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class Enum:
    """Enumeration declaration.

    :param name: Enum name without prefix.
    :param values: Members in document order.
    """

    name: str
    values: tuple[NamedValue, ...] = ()

    def __str__(self) -> str:
        return f"enum {self.name}"


@dataclass(frozen=True)
class Bitmask:
    """Bitmask declaration.

    Rendered like an enum, followed by a ``<Name>Flags`` scalar typedef.

    :param name: Bitmask name without prefix.
    :param values: Members in document order.
    """

    name: str
    values: tuple[NamedValue, ...] = ()

    def __str__(self) -> str:
        return f"bitmask {self.name}"


# =============================================================================
# Functions
# =============================================================================


@dataclass(frozen=True)
class Argument:
    """Function argument.

    :param name: Argument name.
    :param type: Resolved argument type.
    :param annotation: Pointer/array qualifier rendered after the type
        (e.g. ``"const *"``).
    :param length: Name of the argument holding this argument's length, if any.
    :param optional: True if the argument may be null.
    :param default: Default value text, if provided.
    """

    name: str
    type: Optional[TypeRef]
    annotation: Optional[str] = None
    length: Optional[str] = None
    optional: bool = False
    default: Optional[str] = None


@dataclass(frozen=True)
class Function:
    """Function, function pointer or method declaration.

    :param name: Function name without prefix or owner.
    :param return_type: Declared return type, or None for ``void``.
    :param is_async: True if the function reports its result through a callback.
        Async functions always return ``void``.
    :param callback: Callback type override. Defaults to ``<name>Callback``.
    :param args: Declared arguments in document order.

    Examples
    --------
    ::

        Function("Reference", Primitive("void"))

        Function(
            "RequestDevice",
            is_async=True,
            args=(Argument("descriptor", Reference("DeviceDescriptor"), "const *"),),
        )
    """

    name: str
    return_type: Optional[TypeRef] = None
    is_async: bool = False
    callback: Optional[TypeRef] = None
    args: tuple[Argument, ...] = ()

    def __str__(self) -> str:
        params = ", ".join(a.name for a in self.args)
        return f"{self.name}({params})"


@dataclass(frozen=True)
class Object:
    """Opaque handle type with methods.

    :param name: Object name without prefix.
    :param methods: Method name to :class:`Function`.
    :param refcounted: True if ``Reference``/``Release`` methods are generated.
    """

    name: str
    methods: dict[str, Function] = field(default_factory=dict)
    refcounted: bool = False

    def __str__(self) -> str:
        return f"object {self.name}"


# =============================================================================
# Structures
# =============================================================================


@dataclass(frozen=True)
class StructMember:
    """Structure member.

    :param name: Member name.
    :param type: Resolved member type.
    :param annotation: Pointer/array qualifier rendered after the type.
    :param length: Name of the member holding this member's length, if any.
    :param default: Default value text, if provided.
    :param optional: True if the member may be null.
    """

    name: str
    type: Optional[TypeRef]
    annotation: Optional[str] = None
    length: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False


@dataclass(frozen=True)
class Struct:
    """Structure declaration.

    :param name: Structure name without prefix.
    :param members: Members in document order (the memory layout order).
    :param methods: Method name to :class:`Function`.
    :param extensible: Whether the struct accepts (``IN``) or produces (``OUT``)
        an extension chain.
    :param chained: Whether the struct can be chained in (``IN``) or out (``OUT``).
    :param chained_to: Names of the structs this one may be chained onto.

    Example
    -------
    ::

        Struct(
            "SurfaceSourceXlibWindow",
            (StructMember("window", Primitive("uint64_t")),),
            chained=Direction.IN,
            chained_to=("SurfaceDescriptor",),
        )
    """

    name: str
    members: tuple[StructMember, ...] = ()
    methods: dict[str, Function] = field(default_factory=dict)
    extensible: Optional[Direction] = None
    chained: Optional[Direction] = None
    chained_to: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"struct {self.name}"


# =============================================================================
# Schema container
# =============================================================================


@dataclass(frozen=True)
class TypeTable:
    """All type declarations, keyed by name per kind."""

    enums: dict[str, Enum] = field(default_factory=dict)
    bitmasks: dict[str, Bitmask] = field(default_factory=dict)
    structs: dict[str, Struct] = field(default_factory=dict)
    values: dict[str, ValueType] = field(default_factory=dict)


@dataclass(frozen=True)
class Schema:
    """Container for a loaded API schema.

    This is the top-level result of :func:`headergen.loader.load_schema` and
    the input of :class:`headergen.writer.HeaderWriter`.

    :param license: Raw license text.
    :param prefix: C prefix applied to every public symbol (e.g. ``"WGPU"``).
    :param defines: Constant name to :class:`Constant`.
    :param types: All type declarations.
    :param free_functions: Function name to free :class:`Function`.
    :param function_pointers: Name to function pointer :class:`Function`.
    :param objects: Object name to :class:`Object`.
    """

    license: str = ""
    prefix: str = ""
    defines: dict[str, Constant] = field(default_factory=dict)
    types: TypeTable = field(default_factory=TypeTable)
    free_functions: dict[str, Function] = field(default_factory=dict)
    function_pointers: dict[str, Function] = field(default_factory=dict)
    objects: dict[str, Object] = field(default_factory=dict)

    def __str__(self) -> str:
        counts = ", ".join(
            f"{len(items)} {kind}"
            for kind, items in (
                ("defines", self.defines),
                ("enums", self.types.enums),
                ("bitmasks", self.types.bitmasks),
                ("structs", self.types.structs),
                ("values", self.types.values),
                ("functions", self.free_functions),
                ("function pointers", self.function_pointers),
                ("objects", self.objects),
            )
        )
        return f"Schema({self.prefix}: {counts})"
