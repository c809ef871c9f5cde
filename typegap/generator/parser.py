"""Metadata description parser using Lark."""

import os
from dataclasses import dataclass, field
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from .types import (
    HOST_NAMESPACE,
    EnumMember,
    HttpVerb,
    HubDescriptor,
    MethodDescriptor,
    Parameter,
    ParameterSource,
    ServiceDescriptor,
    ServiceMethod,
    TypeDescriptor,
    TypeKind,
    TypeMember,
    array_of,
    async_of,
    collection_of,
    dictionary_of,
    generic_parameter,
    instantiate,
    optional_of,
    primitive,
    string_type,
    void_type,
)

_g_parser: Lark | None = None

PRIMITIVE_NAMES = frozenset(
    [
        "bool",
        "byte",
        "sbyte",
        "short",
        "ushort",
        "int",
        "uint",
        "long",
        "ulong",
        "float",
        "double",
        "decimal",
        "char",
        "object",
        "DateTime",
        "DateTimeOffset",
        "TimeSpan",
    ]
)

COLLECTION_NAMES = frozenset(
    [
        "List",
        "IList",
        "IEnumerable",
        "ICollection",
        "IReadOnlyList",
        "IReadOnlyCollection",
        "HashSet",
        "ISet",
    ]
)

DICTIONARY_NAMES = frozenset(["Dictionary", "IDictionary", "IReadOnlyDictionary"])

ASYNC_NAMES = frozenset(["Task", "ValueTask"])

IGNORE_ANNOTATION = "ignore"
SYNTHESIZED_ANNOTATION = "synthesized"
BINDING_ANNOTATIONS = frozenset(source.value for source in ParameterSource)


class ValidationError(RuntimeError):
    """Raised when a metadata description is invalid."""


@dataclass
class Metadata:
    """Descriptors read from a metadata description."""

    types: list[TypeDescriptor]
    services: list[ServiceDescriptor]
    hubs: list[HubDescriptor]

    @property
    def roots(self) -> list[TypeDescriptor]:
        """Declared types, except interfaces only used as hub client contracts."""
        contracts = {id(hub.client_contract) for hub in self.hubs if hub.client_contract}
        return [t for t in self.types if id(t) not in contracts]


@dataclass
class _TypeRef:
    name: str
    args: list[Any] = field(default_factory=list)


@dataclass
class _ArrayRef:
    element: Any


@dataclass
class _OptionalRef:
    value: Any


@dataclass
class _Annotation:
    name: str


@dataclass
class _TypeParams:
    names: list[str]


@dataclass
class _Bases:
    refs: list[Any]


@dataclass
class _Params:
    params: list["_Param"]


@dataclass
class _Route:
    value: str


@dataclass
class _Member:
    name: str
    ref: Any
    annotations: list[str]


@dataclass
class _Param:
    name: str
    ref: Any
    annotations: list[str]


@dataclass
class _Method:
    name: str
    params: list[_Param]
    ref: Any


@dataclass
class _Decl:
    kind: TypeKind
    name: str
    annotations: list[str]
    type_params: list[str]
    bases: list[Any]
    members: list[_Member]
    methods: list[_Method]
    values: list[EnumMember]


@dataclass
class _Namespace:
    name: str
    decls: list[_Decl]


@dataclass
class _Action:
    verb: HttpVerb
    method: _Method
    route: str | None


@dataclass
class _Service:
    name: str
    route: str
    actions: list[_Action]


@dataclass
class _Hub:
    name: str
    bases: list[Any]
    methods: list[_Method]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")
    return filtered[0]


def _names(args: list[Any]) -> list[str]:
    return [str(v) for v in args if isinstance(v, Token) and v.type == "NAME"]


def _annotations(args: list[Any]) -> list[str]:
    return [a.name for a in _filter(args, _Annotation)]


def _type_ref(args: list[Any]) -> Any:
    refs = [v for v in args if isinstance(v, (_TypeRef, _ArrayRef, _OptionalRef))]
    return refs[-1]


class TreeTransformer(Transformer):
    """Transform parse tree into intermediate declarations."""

    def start(self, args: list[Any]) -> list[Any]:
        return list(args)

    def annotation(self, args: list[Any]) -> _Annotation:
        return _Annotation(name=str(args[0]))

    def named_type(self, args: list[Any]) -> _TypeRef:
        generic = _find_one(args, list)
        return _TypeRef(name=str(args[0]), args=generic or [])

    def generic_args(self, args: list[Any]) -> list[Any]:
        return list(args)

    def array_type(self, args: list[Any]) -> _ArrayRef:
        return _ArrayRef(element=args[0])

    def optional_type(self, args: list[Any]) -> _OptionalRef:
        return _OptionalRef(value=args[0])

    def type_params(self, args: list[Any]) -> _TypeParams:
        return _TypeParams(names=[str(a) for a in args])

    def base_types(self, args: list[Any]) -> _Bases:
        return _Bases(refs=list(args))

    def member(self, args: list[Any]) -> _Member:
        return _Member(name=_names(args)[0], ref=_type_ref(args), annotations=_annotations(args))

    def param(self, args: list[Any]) -> _Param:
        return _Param(name=_names(args)[0], ref=_type_ref(args), annotations=_annotations(args))

    def params(self, args: list[Any]) -> _Params:
        return _Params(params=_filter(args, _Param))

    def method(self, args: list[Any]) -> _Method:
        params = _find_one(args, _Params)
        return _Method(
            name=_names(args)[0],
            params=params.params if params else [],
            ref=_type_ref(args),
        )

    def route(self, args: list[Any]) -> _Route:
        return _Route(value=str(args[0])[1:-1])

    def enum_value(self, args: list[Any]) -> EnumMember:
        return EnumMember(name=str(args[0]), value=int(args[1]))

    def _decl(self, kind: TypeKind, args: list[Any]) -> _Decl:
        type_params = _find_one(args, _TypeParams)
        bases = _find_one(args, _Bases)
        return _Decl(
            kind=kind,
            name=_names(args)[0],
            annotations=_annotations(args),
            type_params=type_params.names if type_params else [],
            bases=bases.refs if bases else [],
            members=_filter(args, _Member),
            methods=_filter(args, _Method),
            values=_filter(args, EnumMember),
        )

    def enum(self, args: list[Any]) -> _Decl:
        return self._decl(TypeKind.ENUM, args)

    def class_decl(self, args: list[Any]) -> _Decl:
        return self._decl(TypeKind.CLASS, args)

    def interface_decl(self, args: list[Any]) -> _Decl:
        return self._decl(TypeKind.INTERFACE, args)

    def namespace(self, args: list[Any]) -> _Namespace:
        return _Namespace(name=str(args[0]), decls=_filter(args, _Decl))

    def action(self, args: list[Any]) -> _Action:
        params = _find_one(args, _Params)
        route = _find_one(args, _Route)
        return _Action(
            verb=HttpVerb(str(args[0])),
            method=_Method(
                name=_names(args)[0],
                params=params.params if params else [],
                ref=_type_ref(args),
            ),
            route=route.value if route else None,
        )

    def service(self, args: list[Any]) -> _Service:
        route = _find_one(args, _Route)
        return _Service(
            name=_names(args)[0],
            route=route.value if route else "",
            actions=_filter(args, _Action),
        )

    def hub(self, args: list[Any]) -> _Hub:
        bases = _find_one(args, _Bases)
        return _Hub(
            name=_names(args)[0],
            bases=bases.refs if bases else [],
            methods=_filter(args, _Method),
        )


class _Resolver:
    """Resolve intermediate declarations into a descriptor graph."""

    def __init__(self, namespaces: list[_Namespace]):
        self.namespaces = namespaces
        self.declared: dict[str, TypeDescriptor] = {}
        self.by_simple_name: dict[str, list[TypeDescriptor]] = {}

    def declare(self) -> list[TypeDescriptor]:
        """Create an empty descriptor for every declaration."""
        types = []
        for namespace in self.namespaces:
            for decl in namespace.decls:
                t = TypeDescriptor(
                    kind=decl.kind,
                    name=decl.name,
                    namespace=namespace.name,
                    type_parameters=decl.type_params,
                    enum_members=decl.values,
                    synthesized=SYNTHESIZED_ANNOTATION in decl.annotations,
                )
                if t.full_name in self.declared:
                    raise ValidationError(f"{t.full_name} is declared more than once")
                self.declared[t.full_name] = t
                self.by_simple_name.setdefault(t.name, []).append(t)
                types.append(t)
        return types

    def fill(self) -> None:
        """Resolve bases, members and methods of every declaration."""
        for namespace in self.namespaces:
            for decl in namespace.decls:
                t = self.declared[f"{namespace.name}.{decl.name}"]
                scope = (namespace.name, decl.type_params)
                t.bases.extend(self.resolve(ref, scope) for ref in decl.bases)
                t.members.extend(
                    TypeMember(
                        name=member.name,
                        type=self.resolve(member.ref, scope),
                        ignored=IGNORE_ANNOTATION in member.annotations,
                    )
                    for member in decl.members
                )
                t.methods.extend(self.method(m, scope) for m in decl.methods)

    def method(self, method: _Method, scope: tuple[str, list[str]]) -> MethodDescriptor:
        return MethodDescriptor(
            name=method.name,
            parameters=tuple(self.parameter(p, scope) for p in method.params),
            return_type=self.resolve(method.ref, scope),
        )

    def parameter(self, param: _Param, scope: tuple[str, list[str]]) -> Parameter:
        bindings = [ParameterSource(a) for a in param.annotations if a in BINDING_ANNOTATIONS]
        if len(bindings) > 1:
            raise ValidationError(f"Parameter {param.name} has more than one binding")
        return Parameter(
            name=param.name,
            type=self.resolve(param.ref, scope),
            binding=bindings[0] if bindings else None,
        )

    def resolve(self, ref: Any, scope: tuple[str, list[str]]) -> TypeDescriptor:
        """Resolve a type reference within (namespace, type parameters)."""
        if isinstance(ref, _ArrayRef):
            return array_of(self.resolve(ref.element, scope))
        if isinstance(ref, _OptionalRef):
            return optional_of(self.resolve(ref.value, scope))

        args = [self.resolve(arg, scope) for arg in ref.args]
        builtin = self._builtin(ref.name, args)
        if builtin is not None:
            return builtin

        namespace, type_params = scope
        if ref.name in type_params:
            if args:
                raise ValidationError(f"Type parameter {ref.name} cannot take type arguments")
            return generic_parameter(ref.name)

        definition = self.lookup(ref.name, namespace)
        if not definition.type_parameters and not args:
            return definition
        try:
            return instantiate(definition, args)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def lookup(self, name: str, namespace: str) -> TypeDescriptor:
        """Find a declaration by local, simple or fully qualified name."""
        local = f"{namespace}.{name}" if namespace else name
        if local in self.declared:
            return self.declared[local]
        if name in self.declared:
            return self.declared[name]

        candidates = self.by_simple_name.get(name, [])
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1:
            options = ", ".join(t.full_name for t in candidates)
            raise ValidationError(f"{name} is ambiguous: {options}")
        raise ValidationError(f"Unknown type {name}")

    def _builtin(self, name: str, args: list[TypeDescriptor]) -> TypeDescriptor | None:
        def arity(count: int) -> None:
            if len(args) != count:
                raise ValidationError(f"{name} expects {count} type arguments, got {len(args)}")

        if name in ("string", "String"):
            arity(0)
            return string_type()
        if name == "void":
            arity(0)
            return void_type()
        if name in PRIMITIVE_NAMES:
            arity(0)
            return primitive(name)
        if name == "Guid":
            arity(0)
            return TypeDescriptor(TypeKind.CLASS, "Guid", HOST_NAMESPACE)
        if name in COLLECTION_NAMES:
            arity(1)
            return collection_of(args[0], name)
        if name in DICTIONARY_NAMES:
            arity(2)
            return dictionary_of(args[0], args[1], name)
        if name == "Nullable":
            arity(1)
            return optional_of(args[0])
        if name in ASYNC_NAMES:
            if len(args) > 1:
                raise ValidationError(f"{name} takes at most one type argument")
            return async_of(args[0] if args else None, name)
        return None

    def service(self, service: _Service) -> ServiceDescriptor:
        scope = ("", [])
        return ServiceDescriptor(
            name=service.name,
            route_template=service.route,
            methods=tuple(
                ServiceMethod(
                    method=self.method(action.method, scope),
                    verb=action.verb,
                    route=action.route,
                )
                for action in service.actions
            ),
        )

    def hub(self, hub: _Hub) -> HubDescriptor:
        scope = ("", [])
        if len(hub.bases) > 1:
            raise ValidationError(f"Hub {hub.name} declares more than one base type")

        base_name = "Hub"
        contract = None
        if hub.bases:
            base = hub.bases[0]
            if not isinstance(base, _TypeRef):
                raise ValidationError(f"Hub {hub.name} has an invalid base type")
            base_name = base.name
            if len(base.args) > 1:
                raise ValidationError(f"{base.name} takes at most one type argument")
            if base.args:
                contract = self.resolve(base.args[0], scope)

        return HubDescriptor(
            name=hub.name,
            client_contract=contract,
            methods=tuple(self.method(m, scope) for m in hub.methods),
            base_name=base_name,
        )


def parse(text: str) -> Metadata:
    """Parse a metadata description file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/typedef.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    items = TreeTransformer().transform(tree)

    resolver = _Resolver(_filter(items, _Namespace))
    types = resolver.declare()
    resolver.fill()

    services = [resolver.service(s) for s in _filter(items, _Service)]
    hubs = [resolver.hub(h) for h in _filter(items, _Hub)]

    names = [s.name for s in services] + [h.name for h in hubs]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate service or hub names: {', '.join(duplicates)}")

    return Metadata(types=types, services=services, hubs=hubs)
