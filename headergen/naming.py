"""Naming policy for generated C symbols.

All public symbols derive from the schema's C prefix. :class:`NamingPolicy`
is built once per run and handed to every formatter, so the suffix and macro
conventions live in one place.

Example
-------
::

    naming = NamingPolicy("WGPU")
    naming.type_name("Device")                # "WGPUDevice"
    naming.function_name("Device", "Release")  # "wgpuDeviceRelease"
    naming.enum_attribute                     # "WGPU_ENUM_ATTRIBUTE"
"""

from dataclasses import (
    dataclass,
)

DEFAULT_GUARD = "WEBGPU_H_"

# Attribute macros a consumer may define before including the header
ATTRIBUTE_KINDS = ("OBJECT", "ENUM", "STRUCTURE", "FUNCTION")


@dataclass(frozen=True)
class NamingPolicy:
    """Derives every emitted symbol name from the API prefix.

    :param prefix: C prefix declared by the schema (e.g. ``"WGPU"``).
    :param guard: Include guard symbol.
    """

    prefix: str
    guard: str = DEFAULT_GUARD

    def type_name(self, name: str) -> str:
        """Prefixed type name: ``Device`` -> ``WGPUDevice``."""
        return f"{self.prefix}{name}"

    def define_name(self, name: str) -> str:
        """Prefixed macro name: ``EXPORT`` -> ``WGPU_EXPORT``."""
        return f"{self.prefix}_{name}"

    def attribute(self, kind: str) -> str:
        return self.define_name(f"{kind}_ATTRIBUTE")

    @property
    def attributes(self) -> tuple[str, ...]:
        return tuple(self.attribute(kind) for kind in ATTRIBUTE_KINDS)

    @property
    def object_attribute(self) -> str:
        return self.attribute("OBJECT")

    @property
    def enum_attribute(self) -> str:
        return self.attribute("ENUM")

    @property
    def struct_attribute(self) -> str:
        return self.attribute("STRUCTURE")

    @property
    def function_attribute(self) -> str:
        return self.attribute("FUNCTION")

    @property
    def nullable(self) -> str:
        return self.define_name("NULLABLE")

    @property
    def export(self) -> str:
        return self.define_name("EXPORT")

    @property
    def skip_procs(self) -> str:
        return self.define_name("SKIP_PROCS")

    @property
    def skip_declarations(self) -> str:
        return self.define_name("SKIP_DECLARATIONS")

    def proc_name(self, owner: str, func: str) -> str:
        """Proc typedef name: ``WGPUProc<Owner><Func>``."""
        return f"{self.type_name('Proc')}{owner}{func}"

    def function_name(self, owner: str, func: str) -> str:
        """Exported function name: ``wgpu<Owner><Func>``."""
        return f"{self.prefix.lower()}{owner}{func}"

    @staticmethod
    def parameter_name(owner: str) -> str:
        """Name of the synthesized ``self`` parameter: ``Device`` -> ``device``."""
        return f"{owner[:1].lower()}{owner[1:]}"

    @staticmethod
    def member_name(name: str) -> str:
        """Enum member spelling: first letter upper-cased."""
        return f"{name[:1].upper()}{name[1:]}"
