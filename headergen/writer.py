"""IR to C header writer.

This module converts a loaded :class:`~headergen.ir.Schema` into the public
``webgpu.h`` header.

Features
--------
* Dependency ordering - Structs are emitted after every struct they embed
* Chaining support - ``nextInChain``/``chain`` fields are synthesized
* Async functions - Callback and userdata parameters are appended
* Ref-counted objects - ``Reference``/``Release`` methods are generated

Example
-------
::

    from headergen.loader import parse_schema
    from headergen.writer import write_header

    schema = parse_schema(xml_text)
    with open("webgpu.h", "w") as f:
        f.write(write_header(schema))
"""

import re
from collections.abc import (
    Callable,
)
from typing import (
    Optional,
    Union,
)

from headergen.ir import (
    Bitmask,
    Direction,
    Enum,
    Function,
    Schema,
    Struct,
    StructMember,
)
from headergen.naming import (
    DEFAULT_GUARD,
    NamingPolicy,
)
from headergen.ordering import (
    sorted_structures,
)
from headergen.types import (
    Primitive,
    Reference,
    TypeResolver,
)

# Sentinel member forcing enums to a 32-bit underlying type
FORCE32_VALUE = "0x7FFFFFFF"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def format_hex(value: Optional[str]) -> str:
    """Format an enum literal as 8 upper-case hex digits.

    The literal is parsed with Python integer syntax (``"16"``, ``"0x10"``).
    Anything else falls back to its leading decimal digits, or 0.
    """
    text = (value or "").strip()
    try:
        number = int(text, 0)
    except ValueError:
        match = _LEADING_INT.match(text)
        number = int(match.group(1)) if match else 0
    return f"{number & 0xFFFFFFFF:08X}"


def format_license(text: str) -> list[str]:
    """Turn the schema's license text into ``//`` comment lines.

    Leading and trailing blank lines are dropped and the indentation of the
    first non-blank line is removed from every line.
    """
    lines = text.split("\n")
    if lines and not lines[0].strip():
        lines.pop(0)
    if lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return []

    trim = len(lines[0]) - len(lines[0].lstrip())
    return [f"// {line[trim:]}".strip() for line in lines]


def format_signature(
    resolver: TypeResolver,
    owner: str,
    func: Function,
    nullable: bool = True,
    tag_structs: bool = False,
) -> str:
    """Format the parenthesized parameter list of a function.

    Used by function pointer typedefs, proc typedefs and declarations alike.

    :param resolver: Type resolver for the schema being written.
    :param owner: Name of the owning object or struct, or ``""`` for free functions.
        A non-empty owner adds a leading ``self`` parameter.
    :param func: The function to format.
    :param nullable: If True, optional arguments get the nullable macro.
    :param tag_structs: If True, struct-typed arguments get a ``struct`` tag.
    :returns: The parameter list including parentheses, ``(void)`` when empty.
    """
    naming = resolver.naming
    if not func.args and not owner and not func.is_async:
        return "(void)"

    params: list[str] = []
    if owner:
        params.append(f"{naming.type_name(owner)} {naming.parameter_name(owner)}")

    for arg in func.args:
        param = ""
        if nullable and arg.optional:
            param += f"{naming.nullable} "
        if tag_structs and resolver.is_struct(arg.type):
            param += "struct "
        param += f"{resolver.format(arg.type)} "
        if arg.annotation:
            param += f"{arg.annotation} "
        param += arg.name
        params.append(param)

    if func.is_async:
        callback = func.callback or Reference(f"{func.name}Callback")
        params.append(f"{resolver.format(callback)} callback, void * userdata")

    return f"({', '.join(params)})"


def format_return(resolver: TypeResolver, func: Function) -> str:
    """Rendered return type; async functions always return ``void``."""
    if func.is_async:
        return "void"
    return resolver.format(func.return_type)


class HeaderWriter:
    """Writes a :class:`~headergen.ir.Schema` as a C header.

    :param schema: The loaded schema.
    :param naming: Naming policy. Defaults to one built from the schema prefix.

    Attributes
    ----------
    INDENT : str
        Indentation string (4 spaces).

    Example
    -------
    ::

        writer = HeaderWriter(schema)
        header = writer.write()
    """

    INDENT = "    "

    def __init__(self, schema: Schema, naming: Optional[NamingPolicy] = None) -> None:
        self.schema = schema
        self.naming = naming or NamingPolicy(schema.prefix)
        self.resolver = TypeResolver(schema.types, self.naming)
        # Computed once; drives forward declarations, bodies and method groups
        self.struct_order = sorted_structures(schema.types.structs)

    def write(self) -> str:
        """Convert the schema to header text.

        :returns: Complete header file content as a string.
        """
        guard = self.naming.guard
        lines: list[str] = []

        lines.extend(format_license(self.schema.license))
        lines.extend([f"#ifndef {guard}", f"#define {guard}", ""])
        lines.extend(self._write_preamble())
        lines.extend(["#include <stdint.h>", "#include <stddef.h>", ""])

        lines.extend(self._write_constants())
        lines.extend(self._write_value_types())
        lines.extend(self._write_object_typedefs())
        lines.extend(self._write_struct_forward_decls())
        lines.extend(self._write_enums())
        lines.extend(self._write_bitmasks())
        lines.extend(self._write_function_pointers())
        lines.extend(self._write_structs())

        lines.extend(["#ifdef __cplusplus", 'extern "C" {', "#endif", ""])
        lines.extend(self._write_guarded_block(self.naming.skip_procs, self._write_procs()))
        lines.append("")
        lines.extend(self._write_guarded_block(self.naming.skip_declarations, self._write_declarations()))
        lines.append("")
        lines.extend(["#ifdef __cplusplus", '} // extern "C"', "#endif", ""])

        lines.append(f"#endif // {guard}")
        return "\n".join(lines) + "\n"

    # -------------------------------------------------------------------------
    # Preamble
    # -------------------------------------------------------------------------

    def _write_preamble(self) -> list[str]:
        """Export macro selection and consumer-overridable attribute macros."""
        shared = self.naming.define_name("SHARED_LIBRARY")
        implementation = self.naming.define_name("IMPLEMENTATION")
        export = self.naming.export
        lines = [
            f"#if defined({shared})",
            "#    if defined(_WIN32)",
            f"#        if defined({implementation})",
            f"#            define {export} __declspec(dllexport)",
            "#        else",
            f"#            define {export} __declspec(dllimport)",
            "#        endif",
            "#    else  // defined(_WIN32)",
            f"#        if defined({implementation})",
            f'#            define {export} __attribute__((visibility("default")))',
            "#        else",
            f"#            define {export}",
            "#        endif",
            "#    endif  // defined(_WIN32)",
            f"#else       // defined({shared})",
            f"#    define {export}",
            f"#endif  // defined({shared})",
            "",
        ]

        for macro in self.naming.attributes + (self.naming.nullable,):
            lines.extend([f"#if !defined({macro})", f"#define {macro}", "#endif"])
        lines.append("")
        return lines

    def _write_guarded_block(self, guard: str, body: list[str]) -> list[str]:
        return [f"#if !defined({guard})", "", *body, f"#endif  // !defined({guard})"]

    # -------------------------------------------------------------------------
    # Constants and typedefs
    # -------------------------------------------------------------------------

    def _write_constants(self) -> list[str]:
        lines = []
        for name in sorted(self.schema.defines):
            define = self.schema.defines[name]
            lines.append(f"#define {self.naming.define_name(define.name)} {define.value or ''}")
        lines.append("")
        return lines

    def _write_value_types(self) -> list[str]:
        # Reverse alphabetical: a value typedef may use one that sorts after it
        lines = []
        for name in sorted(self.schema.types.values, reverse=True):
            value = self.schema.types.values[name]
            lines.append(f"typedef {value.type or ''} {self.naming.type_name(value.name)};")
        lines.append("")
        return lines

    def _write_object_typedefs(self) -> list[str]:
        lines = []
        for name in sorted(self.schema.objects):
            handle = self.naming.type_name(self.schema.objects[name].name)
            lines.append(f"typedef struct {handle}Impl* {handle} {self.naming.object_attribute};")
        lines.append("")
        return lines

    def _write_struct_forward_decls(self) -> list[str]:
        lines = ["// Structure forward declarations"]
        for name in self.struct_order:
            lines.append(f"struct {self.naming.type_name(self.schema.types.structs[name].name)};")
        lines.append("")
        return lines

    # -------------------------------------------------------------------------
    # Enums and bitmasks
    # -------------------------------------------------------------------------

    def _write_enums(self) -> list[str]:
        lines = []
        for name in sorted(self.schema.types.enums):
            lines.extend(self._write_enum_body(self.schema.types.enums[name]))
            lines.append("")
        return lines

    def _write_bitmasks(self) -> list[str]:
        lines = []
        for name in sorted(self.schema.types.bitmasks):
            bitmask = self.schema.types.bitmasks[name]
            lines.extend(self._write_enum_body(bitmask))
            flags = self.naming.type_name("Flags")
            lines.append(f"typedef {flags} {self.naming.type_name(bitmask.name)}Flags {self.naming.enum_attribute};")
            lines.append("")
        return lines

    def _write_enum_body(self, enum: Union[Enum, Bitmask]) -> list[str]:
        name = self.naming.type_name(enum.name)
        lines = [f"typedef enum {name} {{"]
        for value in enum.values:
            member = self.naming.member_name(value.name)
            lines.append(f"{self.INDENT}{name}_{member} = 0x{format_hex(value.value)},")
        lines.append(f"{self.INDENT}{name}_Force32 = {FORCE32_VALUE}")
        lines.append(f"}} {name} {self.naming.enum_attribute};")
        return lines

    # -------------------------------------------------------------------------
    # Function pointers and structs
    # -------------------------------------------------------------------------

    def _write_function_pointers(self) -> list[str]:
        lines = []
        for name in sorted(self.schema.function_pointers):
            fp = self.schema.function_pointers[name]
            ret = format_return(self.resolver, fp)
            args = format_signature(self.resolver, "", fp, nullable=False, tag_structs=True)
            lines.append(f"typedef {ret} (*{self.naming.type_name(fp.name)}){args} {self.naming.function_attribute};")
        lines.append("")
        return lines

    def _chain_structs(self) -> list[Struct]:
        """The chain header structs every extensible struct depends on."""
        chained = self.naming.type_name("ChainedStruct")
        chained_out = self.naming.type_name("ChainedStructOut")
        return [
            Struct(
                "ChainedStruct",
                (
                    StructMember("next", Primitive(f"struct {chained}"), "const *"),
                    StructMember("sType", Reference("SType")),
                ),
            ),
            Struct(
                "ChainedStructOut",
                (
                    StructMember("next", Primitive(f"struct {chained_out} *")),
                    StructMember("sType", Reference("SType")),
                ),
            ),
        ]

    def _write_structs(self) -> list[str]:
        lines = []
        for struct in self._chain_structs():
            lines.extend(self._write_struct(struct))
        for name in self.struct_order:
            lines.extend(self._write_struct(self.schema.types.structs[name]))
        return lines

    def _write_struct(self, struct: Struct) -> list[str]:
        lines = []
        name = self.naming.type_name(struct.name)
        chain_in = struct.chained == Direction.IN
        chain_out = struct.chained == Direction.OUT

        if (chain_in or chain_out) and struct.chained_to:
            roots = ", ".join(self.naming.type_name(root) for root in struct.chained_to)
            lines.append(f"// Can be chained in {roots}")

        lines.append(f"typedef struct {name} {{")
        chained = self.naming.type_name("ChainedStruct")
        if struct.extensible == Direction.IN:
            lines.append(f"{self.INDENT}{chained} const * nextInChain;")
        if chain_in:
            lines.append(f"{self.INDENT}{chained} chain;")
        if chain_out or struct.extensible == Direction.OUT:
            lines.append(f"{self.INDENT}{self.naming.type_name('ChainedStructOut')} * nextInChain;")

        for member in struct.members:
            nullable = f"{self.naming.nullable} " if member.optional else ""
            annotation = f"{member.annotation} " if member.annotation else ""
            member_type = self.resolver.format(member.type)
            lines.append(f"{self.INDENT}{nullable}{member_type} {annotation}{member.name};")

        lines.append(f"}} {name} {self.naming.struct_attribute};")
        lines.append("")
        return lines

    # -------------------------------------------------------------------------
    # Procs and declarations
    # -------------------------------------------------------------------------

    def _owned_functions(self) -> list[tuple[str, list[Function]]]:
        """Group functions by owner in emission order.

        Free functions come first under the empty owner, then objects
        alphabetically (with ``Reference``/``Release`` for ref-counted ones),
        then structs with methods in dependency order.
        """
        groups: list[tuple[str, list[Function]]] = []
        free = self.schema.free_functions
        groups.append(("", [free[name] for name in sorted(free)]))

        for name in sorted(self.schema.objects):
            obj = self.schema.objects[name]
            methods = [obj.methods[key] for key in sorted(obj.methods)]
            if obj.refcounted:
                methods.append(Function("Reference", Primitive("void")))
                methods.append(Function("Release", Primitive("void")))
            groups.append((obj.name, methods))

        for name in self.struct_order:
            struct = self.schema.types.structs[name]
            if not struct.methods:
                continue
            groups.append((struct.name, [struct.methods[key] for key in sorted(struct.methods)]))
        return groups

    def _write_all_functions(self, title: str, write_one: Callable[[str, Function], str]) -> list[str]:
        lines = []
        for owner, functions in self._owned_functions():
            if owner:
                lines.append(f"// {title} of {owner}")
            for func in functions:
                lines.append(write_one(owner, func))
            lines.append("")
        return lines

    def _write_proc(self, owner: str, func: Function) -> str:
        ret = format_return(self.resolver, func)
        name = self.naming.proc_name(owner, func.name)
        args = format_signature(self.resolver, owner, func)
        return f"typedef {ret} (*{name}){args} {self.naming.function_attribute};"

    def _write_declaration(self, owner: str, func: Function) -> str:
        ret = format_return(self.resolver, func)
        name = self.naming.function_name(owner, func.name)
        args = format_signature(self.resolver, owner, func)
        return f"{self.naming.export} {ret} {name}{args} {self.naming.function_attribute};"

    def _write_procs(self) -> list[str]:
        return self._write_all_functions("Procs", self._write_proc)

    def _write_declarations(self) -> list[str]:
        return self._write_all_functions("Methods", self._write_declaration)


def write_header(schema: Schema, guard: str = DEFAULT_GUARD) -> str:
    """Convert a schema to C header text.

    :param schema: The loaded schema.
    :param guard: Include guard symbol.
    :returns: Complete header content.
    """
    writer = HeaderWriter(schema, NamingPolicy(schema.prefix, guard))
    return writer.write()
