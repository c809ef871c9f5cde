"""Client stub signatures for server and hub methods."""

from .converter import VOID, TypeConverter
from .translator import Translator
from .types import MethodDescriptor, Parameter, TypeKind, unwrap
from .util import to_camel_case


class MethodSignatureGenerator:
    """Produce typed stub signatures and register every referenced type."""

    def __init__(self, converter: TypeConverter, translator: Translator, promise_type: str):
        self.converter = converter
        self.translator = translator
        self.promise_type = promise_type

    def parameter(self, param: Parameter) -> str:
        """Render ``name: type`` for a parameter."""
        return f"{param.name}: {self.converter.name_of(unwrap(param.type))}"

    def return_type(self, method: MethodDescriptor) -> str:
        """Render the stub return type, wrapped in the promise type unless void."""
        result = unwrap(method.return_type)
        if result.kind == TypeKind.VOID:
            return VOID
        return f"{self.promise_type}<{self.converter.name_of(result)}>"

    def generate(self, method: MethodDescriptor) -> str:
        """Render ``camelName(a: A, b: B): Promise<R>`` for a method."""
        self.translator.process(unwrap(p.type) for p in method.parameters)
        self.translator.process([unwrap(method.return_type)])

        params = ", ".join(self.parameter(p) for p in method.parameters)
        return f"{to_camel_case(method.name)}({params}): {self.return_type(method)}"
