"""Descriptor definitions for type translation and stub generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto

HOST_NAMESPACE = "System"
COLLECTIONS_NAMESPACE = "System.Collections.Generic"
TASKS_NAMESPACE = "System.Threading.Tasks"


class TypeKind(StrEnum):
    """Classification of a source type."""

    PRIMITIVE = auto()
    STRING = auto()
    ENUM = auto()
    CLASS = auto()
    INTERFACE = auto()
    ARRAY = auto()
    COLLECTION = auto()
    DICTIONARY = auto()
    OPTIONAL = auto()
    ASYNC_WRAPPER = auto()
    VOID = auto()
    GENERIC_PARAMETER = auto()


# Kinds that produce a named declaration
DECLARABLE_KINDS = frozenset([TypeKind.CLASS, TypeKind.INTERFACE, TypeKind.ENUM])

# Kinds rendered as an object shape rather than a scalar
COMPLEX_KINDS = frozenset(
    [
        TypeKind.CLASS,
        TypeKind.INTERFACE,
        TypeKind.ARRAY,
        TypeKind.COLLECTION,
        TypeKind.DICTIONARY,
    ]
)


class HttpVerb(StrEnum):
    """HTTP verb of a service method."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


# Verbs that carry a request body
BODY_VERBS = frozenset([HttpVerb.POST, HttpVerb.PUT, HttpVerb.PATCH])


class ParameterSource(StrEnum):
    """Where a service parameter is bound in the request."""

    ROUTE = auto()
    QUERY = auto()
    BODY = auto()


@dataclass(frozen=True)
class EnumMember:
    """Represents a single enum value."""

    name: str
    value: int


@dataclass(frozen=True)
class TypeMember:
    """Represents a field or property of a class or interface."""

    name: str
    type: TypeDescriptor
    ignored: bool = False


@dataclass(eq=False)
class TypeDescriptor:
    """Represents a reflected source type.

    The kind decides which of the other fields are meaningful:

    - array, collection, optional: ``generic_arguments[0]`` is the element
    - async_wrapper: ``generic_arguments`` holds the result type, or nothing
    - dictionary: ``generic_arguments`` is ``[key, value]``
    - class, interface: ``members``, ``bases``, ``type_parameters`` and, for
      a closed generic, ``generic_arguments``
    - enum: ``enum_members``

    Descriptors may reference each other cyclically. Member and base lists are
    filled once while the graph is built and are not mutated afterwards;
    closed generics share those lists with their definition.
    """

    kind: TypeKind
    name: str
    namespace: str = ""
    generic_arguments: list[TypeDescriptor] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
    members: list[TypeMember] = field(default_factory=list)
    enum_members: list[EnumMember] = field(default_factory=list)
    bases: list[TypeDescriptor] = field(default_factory=list)
    methods: list[MethodDescriptor] = field(default_factory=list)
    synthesized: bool = False

    @property
    def full_name(self) -> str:
        """Dotted source name, without generic arguments."""
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def identity(self) -> str:
        """Source name including generic arguments, e.g. ``Acme.Page<Acme.User>``."""
        if not self.generic_arguments:
            return self.full_name
        args = ", ".join(arg.identity for arg in self.generic_arguments)
        return f"{self.full_name}<{args}>"

    @property
    def element_type(self) -> TypeDescriptor | None:
        """First generic argument, if any."""
        return self.generic_arguments[0] if self.generic_arguments else None

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.kind.value} {self.identity})"


@dataclass(frozen=True)
class Parameter:
    """Represents a method parameter."""

    name: str
    type: TypeDescriptor
    binding: ParameterSource | None = None


@dataclass(frozen=True)
class MethodDescriptor:
    """Represents a server action, hub method or client callback."""

    name: str
    parameters: tuple[Parameter, ...]
    return_type: TypeDescriptor


@dataclass(frozen=True)
class ServiceMethod:
    """A method exposed by a service with its HTTP routing metadata.

    route=None: the method is served at the service route itself
    """

    method: MethodDescriptor
    verb: HttpVerb = HttpVerb.GET
    route: str | None = None


@dataclass(frozen=True)
class ServiceDescriptor:
    """Represents an HTTP service (controller)."""

    name: str
    route_template: str
    methods: tuple[ServiceMethod, ...]


@dataclass(frozen=True)
class HubDescriptor:
    """Represents a real-time messaging hub.

    client_contract=None: the hub does not declare the methods it may invoke
    on its clients.
    """

    name: str
    client_contract: TypeDescriptor | None
    methods: tuple[MethodDescriptor, ...]
    base_name: str = "Hub"


def primitive(name: str, namespace: str = HOST_NAMESPACE) -> TypeDescriptor:
    """Create a primitive host type."""
    return TypeDescriptor(TypeKind.PRIMITIVE, name, namespace)


def string_type() -> TypeDescriptor:
    """Create the host string type."""
    return TypeDescriptor(TypeKind.STRING, "string", HOST_NAMESPACE)


def void_type() -> TypeDescriptor:
    """Create the host void type."""
    return TypeDescriptor(TypeKind.VOID, "void", HOST_NAMESPACE)


def array_of(element: TypeDescriptor) -> TypeDescriptor:
    """Create an array of the given element type."""
    return TypeDescriptor(TypeKind.ARRAY, f"{element.name}[]", element.namespace, [element])


def collection_of(element: TypeDescriptor, name: str = "List") -> TypeDescriptor:
    """Create a generic enumerable collection of the given element type."""
    return TypeDescriptor(TypeKind.COLLECTION, name, COLLECTIONS_NAMESPACE, [element])


def dictionary_of(
    key: TypeDescriptor, value: TypeDescriptor, name: str = "Dictionary"
) -> TypeDescriptor:
    """Create a dictionary from key type to value type."""
    return TypeDescriptor(TypeKind.DICTIONARY, name, COLLECTIONS_NAMESPACE, [key, value])


def optional_of(value: TypeDescriptor) -> TypeDescriptor:
    """Create an optional (nullable) wrapper around a value type."""
    return TypeDescriptor(TypeKind.OPTIONAL, "Nullable", HOST_NAMESPACE, [value])


def async_of(result: TypeDescriptor | None = None, name: str = "Task") -> TypeDescriptor:
    """Create an async result wrapper; without a result type it is a bare wrapper."""
    args = [result] if result is not None else []
    return TypeDescriptor(TypeKind.ASYNC_WRAPPER, name, TASKS_NAMESPACE, args)


def generic_parameter(name: str) -> TypeDescriptor:
    """Create an open type parameter reference."""
    return TypeDescriptor(TypeKind.GENERIC_PARAMETER, name)


def class_type(
    name: str,
    namespace: str = "",
    members: list[TypeMember] | None = None,
    **kwargs,
) -> TypeDescriptor:
    """Create a class descriptor."""
    return TypeDescriptor(TypeKind.CLASS, name, namespace, members=members or [], **kwargs)


def interface_type(
    name: str,
    namespace: str = "",
    members: list[TypeMember] | None = None,
    **kwargs,
) -> TypeDescriptor:
    """Create an interface descriptor."""
    return TypeDescriptor(TypeKind.INTERFACE, name, namespace, members=members or [], **kwargs)


def enum_type(name: str, namespace: str = "", values: dict[str, int] | None = None) -> TypeDescriptor:
    """Create an enum descriptor from a name -> value mapping."""
    members = [EnumMember(key, value) for key, value in (values or {}).items()]
    return TypeDescriptor(TypeKind.ENUM, name, namespace, enum_members=members)


def instantiate(definition: TypeDescriptor, arguments: list[TypeDescriptor]) -> TypeDescriptor:
    """Close a generic definition over the given type arguments."""
    if len(arguments) != len(definition.type_parameters):
        raise ValueError(
            f"{definition.full_name} expects {len(definition.type_parameters)} "
            f"type arguments, got {len(arguments)}"
        )
    return TypeDescriptor(
        kind=definition.kind,
        name=definition.name,
        namespace=definition.namespace,
        generic_arguments=list(arguments),
        type_parameters=definition.type_parameters,
        members=definition.members,
        enum_members=definition.enum_members,
        bases=definition.bases,
        methods=definition.methods,
        synthesized=definition.synthesized,
    )


def unwrap(t: TypeDescriptor) -> TypeDescriptor:
    """Strip optional and async wrappers; a bare async wrapper becomes void."""
    while t.kind in (TypeKind.OPTIONAL, TypeKind.ASYNC_WRAPPER):
        if not t.generic_arguments:
            return void_type()
        t = t.generic_arguments[0]
    return t
