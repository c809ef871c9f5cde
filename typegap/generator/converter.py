"""Mapping of source type descriptors to TypeScript type names."""

from collections.abc import Iterable

from .types import DECLARABLE_KINDS, HOST_NAMESPACE, TypeDescriptor, TypeKind

# Map host primitive names to TypeScript types
PRIMITIVE_TYPE_MAP = {
    "bool": "boolean",
    "byte": "number",
    "sbyte": "number",
    "short": "number",
    "ushort": "number",
    "int": "number",
    "uint": "number",
    "long": "number",
    "ulong": "number",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "char": "string",
    "object": "any",
    "DateTime": "Date",
    "DateTimeOffset": "Date",
    "TimeSpan": "string",
}

VOID = "void"


class TypeConverter:
    """Render type descriptors as TypeScript type expressions.

    Scalar overrides are consulted before any other rule. Declared types are
    qualified with their output namespace, which is the global namespace when
    one is configured. Declarable types in a reserved namespace render as
    ``any``.
    """

    def __init__(
        self,
        global_namespace: str | None = None,
        scalar_overrides: dict[str, str] | None = None,
        reserved_namespaces: Iterable[str] = (HOST_NAMESPACE,),
    ):
        self.global_namespace = global_namespace or None
        self.scalar_overrides = dict(scalar_overrides or {})
        self.reserved_namespaces = tuple(reserved_namespaces)

    def has_override(self, t: TypeDescriptor) -> bool:
        return t.full_name in self.scalar_overrides

    def is_reserved(self, t: TypeDescriptor) -> bool:
        """Check if a type lives in a reserved host namespace."""
        return any(
            t.namespace == ns or t.namespace.startswith(ns + ".")
            for ns in self.reserved_namespaces
        )

    def output_namespace(self, t: TypeDescriptor) -> str:
        """Module path a declaration is emitted under."""
        return self.global_namespace or t.namespace

    def qualified_name(self, t: TypeDescriptor) -> str:
        """Output name of a declared type, without generic arguments."""
        namespace = self.output_namespace(t)
        return f"{namespace}.{t.name}" if namespace else t.name

    def name_of(self, t: TypeDescriptor) -> str:
        """Render a type reference."""
        if t.full_name in self.scalar_overrides:
            return self.scalar_overrides[t.full_name]

        if t.kind == TypeKind.VOID:
            return VOID
        if t.kind == TypeKind.STRING:
            return "string"
        if t.kind == TypeKind.PRIMITIVE:
            return PRIMITIVE_TYPE_MAP.get(t.name, "any")
        if t.kind == TypeKind.GENERIC_PARAMETER:
            return t.name
        if t.kind in (TypeKind.OPTIONAL, TypeKind.ASYNC_WRAPPER):
            if not t.generic_arguments:
                return VOID
            return self.name_of(t.generic_arguments[0])
        if t.kind in (TypeKind.ARRAY, TypeKind.COLLECTION):
            element = t.element_type
            return f"{self.name_of(element)}[]" if element is not None else "any[]"
        if t.kind == TypeKind.DICTIONARY:
            return self.dictionary_shape(t)
        if t.kind in DECLARABLE_KINDS:
            # Host types are never declared
            if self.is_reserved(t):
                return "any"
            name = self.qualified_name(t)
            if t.generic_arguments:
                args = ", ".join(self.name_of(arg) for arg in t.generic_arguments)
                return f"{name}<{args}>"
            return name

        raise ValueError(f"Unknown type kind: {t.kind}")

    def dictionary_shape(self, t: TypeDescriptor) -> str:
        """Render a dictionary as an inline index signature."""
        if len(t.generic_arguments) != 2:
            return "{ [key: string]: any }"
        key, value = t.generic_arguments
        key_type = "number" if self.name_of(key) == "number" else "string"
        return f"{{ [key: {key_type}]: {self.name_of(value)} }}"

    def declaration_name(self, t: TypeDescriptor) -> str:
        """Name used in a declaration header, e.g. ``Page<T>``."""
        if t.type_parameters:
            return f"{t.name}<{', '.join(t.type_parameters)}>"
        return t.name

    def shape(self, t: TypeDescriptor) -> tuple:
        """Rendered declaration shape used to compare two registrations."""
        if t.kind == TypeKind.ENUM:
            return (t.kind, tuple((m.name, m.value) for m in t.enum_members))
        return (
            t.kind,
            tuple(t.type_parameters),
            tuple(self.name_of(base) for base in t.bases),
            tuple((m.name, self.name_of(m.type), m.ignored) for m in t.members),
        )

    def describe(self, t: TypeDescriptor) -> str:
        """One-line summary of a declaration, used in error messages."""
        header = f"{t.kind.value} {self.qualified_name(t)}"
        if t.kind == TypeKind.ENUM:
            body = ", ".join(f"{m.name} = {m.value}" for m in t.enum_members)
        else:
            body = ", ".join(
                f"{m.name}: {self.name_of(m.type)}" for m in t.members if not m.ignored
            )
        return f"{header} {{ {body} }}" if body else f"{header} {{}}"
