"""TypeScript declaration emitter for translated type models."""

from dataclasses import dataclass, field

from jinja2 import Environment, PackageLoader

from .converter import TypeConverter
from .translator import OutputModel
from .types import TypeDescriptor

env = Environment(
    loader=PackageLoader("typegap.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

definitions_template = env.get_template("definitions.d.ts.j2")
enums_template = env.get_template("enums.ts.j2")


@dataclass
class _Field:
    name: str
    type: str


@dataclass
class _Declaration:
    name: str
    header: str
    fields: list[_Field] = field(default_factory=list)
    values: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class _Group:
    namespace: str
    declarations: list[_Declaration] = field(default_factory=list)


def _class_declaration(t: TypeDescriptor, converter: TypeConverter) -> _Declaration:
    header = converter.declaration_name(t)
    if t.bases:
        header += " extends " + ", ".join(converter.name_of(base) for base in t.bases)
    fields = [
        _Field(member.name, converter.name_of(member.type))
        for member in t.members
        if not member.ignored
    ]
    return _Declaration(name=t.name, header=header, fields=fields)


def _enum_declaration(t: TypeDescriptor) -> _Declaration:
    return _Declaration(
        name=t.name,
        header=t.name,
        values=[(m.name, m.value) for m in t.enum_members],
    )


def _group(
    types: list[TypeDescriptor], converter: TypeConverter, build
) -> list[_Group]:
    """Group declarations by output namespace, in first-registration order."""
    groups: dict[str, _Group] = {}
    for t in types:
        namespace = converter.output_namespace(t)
        if namespace not in groups:
            groups[namespace] = _Group(namespace)
        groups[namespace].declarations.append(build(t))
    return list(groups.values())


def namespace_prefixes(full_names: list[str]) -> list[str]:
    """Return every distinct namespace prefix of the given dotted names, sorted.

    ``["A.B.Color"]`` gives ``["A", "A.B"]``.
    """
    prefixes: set[str] = set()
    for full_name in full_names:
        parts = full_name.split(".")[:-1]
        for i in range(len(parts)):
            prefixes.add(".".join(parts[: i + 1]))
    return sorted(prefixes)


def render_definitions(model: OutputModel, converter: TypeConverter) -> str:
    """Render class and interface declarations."""
    groups = _group(model.classes, converter, lambda t: _class_declaration(t, converter))
    return definitions_template.render(groups=groups, BLANK_LINE="")


def render_enums(
    model: OutputModel,
    converter: TypeConverter,
    *,
    const_enums: bool = True,
    global_root: str = "window",
) -> str:
    """Render enum declarations.

    In runtime mode (const_enums=False) an initialization script follows the
    declarations and publishes every enum on ``global_root`` at its full
    dotted path.
    """
    enums = model.enums
    groups = _group(enums, converter, _enum_declaration)
    full_names = [converter.qualified_name(t) for t in enums]
    return enums_template.render(
        groups=groups,
        const_enums=const_enums,
        global_root=global_root,
        namespaces=namespace_prefixes(full_names),
        enum_names=full_names,
        BLANK_LINE="",
    )
