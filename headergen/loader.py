"""XML schema loader.

Walks the ``webgpu`` XML document and produces the immutable
:mod:`headergen.ir` records. Each entity kind is decoded exactly once here;
later stages never look at XML nodes.

Document Shape
--------------
::

    <webgpu>
      <license>...</license>
      <metadata><prefix><c>WGPU</c></prefix></metadata>
      <defines><define name="..." type="..." value="..."/></defines>
      <types>
        <type kind="enum|bitmask|struct|value">...</type>
      </types>
      <free_functions><function .../></free_functions>
      <function_pointers><function .../></function_pointers>
      <objects><object refcounted="true">...</object></objects>
    </webgpu>

Example
-------
::

    from headergen.loader import parse_schema

    with open("webgpu.xml", encoding="utf-8") as f:
        schema = parse_schema(f.read())
"""

import xml.etree.ElementTree as ET
from typing import (
    Optional,
)

from headergen.ir import (
    SENTINEL_VALUES,
    Argument,
    Bitmask,
    Constant,
    Direction,
    Enum,
    Function,
    NamedValue,
    Object,
    Schema,
    Struct,
    StructMember,
    TypeTable,
    ValueType,
)
from headergen.types import (
    resolve_type,
)

ROOT_TAG = "webgpu"

# Attribute values that leave a flag unset
FALSE_VALUES = {"false", "0"}


class SchemaError(RuntimeError):
    """Raised when the input document cannot be turned into a schema."""


def parse_schema(text: str) -> Schema:
    """Parse XML text and load the schema it describes.

    :param text: Complete XML document.
    :returns: The loaded :class:`~headergen.ir.Schema`.
    :raises SchemaError: If the document is not well formed or has no
        ``webgpu`` element.
    """
    try:
        document = ET.fromstring(text)
    except ET.ParseError as e:
        raise SchemaError(f"Malformed schema document: {e}") from e

    root = document if document.tag == ROOT_TAG else document.find(f".//{ROOT_TAG}")
    if root is None:
        raise SchemaError(f"No <{ROOT_TAG}> element in schema document")
    return load_schema(root)


def load_schema(root: ET.Element) -> Schema:
    """Load every entity below the ``webgpu`` root element."""
    return Schema(
        license=_text_of_first(root, "license") or "",
        prefix=_text_of_first(root, "metadata/prefix/c") or "",
        defines=_load_defines(root.find("defines")),
        types=_load_types(root.find("types")),
        free_functions=_load_functions(root, "free_functions"),
        function_pointers=_load_functions(root, "function_pointers"),
        objects=_load_objects(root.find("objects")),
    )


# =============================================================================
# Node helpers
# =============================================================================


def _text_of_first(node: ET.Element, path: str) -> Optional[str]:
    """Text of the first element matching ``path``, or None if absent."""
    child = node.find(path)
    if child is None:
        return None
    return child.text or ""


def _flag(value: Optional[str]) -> bool:
    """Interpret a boolean attribute; absent means False."""
    if value is None:
        return False
    return value.strip().lower() not in FALSE_VALUES


# =============================================================================
# Constants and types
# =============================================================================


def _load_defines(node: Optional[ET.Element]) -> dict[str, Constant]:
    defines: dict[str, Constant] = {}
    if node is None:
        return defines

    for define in node.findall("define"):
        name = define.get("name", "")
        value = define.get("value")
        value = SENTINEL_VALUES.get(value, value) if value is not None else None
        defines[name] = Constant(name, resolve_type(define.get("type")), value)
    return defines


def _load_named_values(node: ET.Element) -> tuple[NamedValue, ...]:
    return tuple(NamedValue(value.get("name", ""), value.get("value")) for value in node.findall("value"))


def _load_types(node: Optional[ET.Element]) -> TypeTable:
    table = TypeTable()
    if node is None:
        return table

    for enum in node.findall("type[@kind='enum']"):
        name = _text_of_first(enum, "name") or ""
        table.enums[name] = Enum(name, _load_named_values(enum))

    for bitmask in node.findall("type[@kind='bitmask']"):
        name = _text_of_first(bitmask, "name") or ""
        table.bitmasks[name] = Bitmask(name, _load_named_values(bitmask))

    for struct in node.findall("type[@kind='struct']"):
        loaded = _load_struct(struct)
        table.structs[loaded.name] = loaded

    for value in node.findall("type[@kind='value']"):
        name = _text_of_first(value, "name") or ""
        table.values[name] = ValueType(name, _text_of_first(value, "kind"))

    return table


def _direction(node: ET.Element, path: str, struct_name: str) -> Optional[Direction]:
    text = _text_of_first(node, path)
    try:
        return Direction.parse(text)
    except ValueError as e:
        raise SchemaError(f"Unknown direction {text.strip()!r} for {path} of struct {struct_name}") from e


def _load_struct(node: ET.Element) -> Struct:
    name = _text_of_first(node, "name") or ""
    chained = _direction(node, "chained/dir", name)

    members = tuple(
        StructMember(
            name=member.get("name", ""),
            type=resolve_type(member.get("type")),
            annotation=member.get("annotation"),
            length=member.get("length"),
            default=member.get("default"),
            optional=_flag(member.get("optional")),
        )
        for member in node.findall("members/member")
    )

    # Roots are only meaningful for structs that declare a chain direction
    chained_to: tuple[str, ...] = ()
    if chained is not None:
        chained_to = tuple((r.text or "").strip() for r in node.findall("chained/root"))

    return Struct(
        name=name,
        members=members,
        methods=_load_functions(node, "methods"),
        extensible=_direction(node, "extensible", name),
        chained=chained,
        chained_to=chained_to,
    )


# =============================================================================
# Functions and objects
# =============================================================================


def _load_args(node: ET.Element) -> tuple[Argument, ...]:
    return tuple(
        Argument(
            name=arg.get("name", ""),
            type=resolve_type(arg.get("type")),
            annotation=arg.get("annotation"),
            length=arg.get("length"),
            optional=_flag(arg.get("optional")),
            default=arg.get("default"),
        )
        for arg in node.findall("arg")
    )


def _load_functions(node: ET.Element, path: str) -> dict[str, Function]:
    """Load every ``function`` element below ``path``.

    Shared by free functions, function pointers, struct methods and object
    methods so they are all parsed identically.
    """
    functions: dict[str, Function] = {}
    for func in node.findall(f"{path}/function"):
        name = func.get("name", "")
        functions[name] = Function(
            name=name,
            return_type=resolve_type(func.get("return")),
            is_async=_flag(func.get("async")),
            callback=resolve_type(func.get("cb")),
            args=_load_args(func),
        )
    return functions


def _load_objects(node: Optional[ET.Element]) -> dict[str, Object]:
    objects: dict[str, Object] = {}
    if node is None:
        return objects

    for obj in node.findall("object"):
        name = _text_of_first(obj, "name") or ""
        objects[name] = Object(
            name=name,
            methods=_load_functions(obj, "methods"),
            refcounted=_flag(obj.get("refcounted")),
        )
    return objects
