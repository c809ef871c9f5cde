"""Translation of a type descriptor graph into a deduplicated declaration model."""

import logging
from collections import deque
from collections.abc import Iterable, Iterator

from .converter import TypeConverter
from .types import DECLARABLE_KINDS, TypeDescriptor, TypeKind

logger = logging.getLogger(__name__)

# Host built-in kinds that already have a TypeScript equivalent
BUILTIN_KINDS = frozenset([TypeKind.PRIMITIVE, TypeKind.STRING, TypeKind.GENERIC_PARAMETER])


class GenerationError(RuntimeError):
    """Raised when declarations or stubs cannot be generated."""


class NamingCollisionError(GenerationError):
    """Raised when two different declarations share an output name."""

    def __init__(self, existing: TypeDescriptor, incoming: TypeDescriptor, converter: TypeConverter):
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Naming collision on {converter.qualified_name(existing)}: "
            f"{existing.identity} [{converter.describe(existing)}] conflicts with "
            f"{incoming.identity} [{converter.describe(incoming)}]"
        )


class OutputModel:
    """Closed set of declarations to emit, keyed by (output namespace, name).

    Entries keep registration order. The first registration of a key wins; a
    later registration with an identical shape is a no-op and a different
    shape is a naming collision.
    """

    def __init__(self, converter: TypeConverter):
        self.converter = converter
        self._entries: dict[tuple[str, str], TypeDescriptor] = {}

    def key(self, t: TypeDescriptor) -> tuple[str, str]:
        return (self.converter.output_namespace(t), t.name)

    def add(self, t: TypeDescriptor) -> bool:
        """Register a declaration. Return True if the key was not yet present."""
        key = self.key(t)
        existing = self._entries.get(key)
        if existing is None:
            self._entries[key] = t
            logger.debug("Registered %s", t.identity)
            return True

        if existing is not t and self.converter.shape(existing) != self.converter.shape(t):
            raise NamingCollisionError(existing, t, self.converter)
        return False

    def __contains__(self, t: TypeDescriptor) -> bool:
        return self.key(t) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._entries.values())

    def keys(self) -> list[tuple[str, str]]:
        return list(self._entries)

    @property
    def classes(self) -> list[TypeDescriptor]:
        return [t for t in self._entries.values() if t.kind != TypeKind.ENUM]

    @property
    def enums(self) -> list[TypeDescriptor]:
        return [t for t in self._entries.values() if t.kind == TypeKind.ENUM]


class Translator:
    """Walk root descriptors and register every reachable declaration."""

    def __init__(self, model: OutputModel):
        self.model = model
        self.converter = model.converter

    def process(self, roots: Iterable[TypeDescriptor]) -> None:
        """Translate the given descriptors; processing a type twice is a no-op."""
        for root in roots:
            self._walk(root)

    def _walk(self, root: TypeDescriptor) -> None:
        # Depth-first; children are pushed in reverse to keep registration order
        pending = deque([root])
        while pending:
            children = self._visit(pending.pop())
            pending.extend(reversed(children))

    def _visit(self, t: TypeDescriptor) -> list[TypeDescriptor]:
        """Register ``t`` if it is declarable and return the descriptors it references."""
        # Unwrap async results and optionals
        while t.kind in (TypeKind.ASYNC_WRAPPER, TypeKind.OPTIONAL):
            if t.generic_arguments:
                t = t.generic_arguments[0]
            else:
                logger.warning(
                    "Dropping %s: an async wrapper without a result type has no declaration",
                    t.identity,
                )
                return []

        if t.kind == TypeKind.VOID:
            return []
        if self.converter.has_override(t):
            return []
        if t.kind in BUILTIN_KINDS or t.synthesized:
            return []

        if t.kind == TypeKind.DICTIONARY:
            # Emitted inline as an index signature; the value type is left opaque
            return []

        if t.kind in (TypeKind.ARRAY, TypeKind.COLLECTION):
            return list(t.generic_arguments)

        if t.kind not in DECLARABLE_KINDS:
            raise ValueError(f"Unknown type kind: {t.kind}")

        if self.converter.is_reserved(t):
            return []

        added = self.model.add(t)

        children = list(t.generic_arguments)
        if not added or t.kind == TypeKind.ENUM:
            return children

        children.extend(t.bases)
        children.extend(member.type for member in t.members if not member.ignored)
        return children
