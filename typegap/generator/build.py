"""Fluent entry point composing translation and rendering."""

from collections.abc import Callable
from dataclasses import dataclass

from .config import GeneratorConfig
from .converter import TypeConverter
from .emitter import render_definitions, render_enums
from .hubs import HubGenerator, validate_hub
from .methods import MethodSignatureGenerator
from .services import ServiceGenerator
from .translator import OutputModel, Translator
from .types import HubDescriptor, ServiceDescriptor, TypeDescriptor

GENERATED_NOTICE = """// <auto-generated>
//     This file was generated by typegap.
//     Changes to this file will be lost when the code is regenerated.
// </auto-generated>"""


@dataclass
class GeneratedOutput:
    """The three rendered artifacts."""

    definitions: str
    enums: str
    services: str

    def files(self, config: GeneratorConfig) -> dict[str, str]:
        """Map configured file names to their contents, with the generated notice."""
        return {
            config.definitions_file: _with_notice(self.definitions),
            config.services_file: _with_notice(self.services),
            config.enums_file: _with_notice(self.enums),
        }


def _with_notice(content: str) -> str:
    return f"{GENERATED_NOTICE}\n\n{content}"


class TypeGap:
    """Collect root types, services and hubs, then build all artifacts."""

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        url_rewriter: Callable[[str], str] | None = None,
    ):
        self.config = config or GeneratorConfig()
        self.url_rewriter = url_rewriter or self.config.rewrite_url
        self.types: list[TypeDescriptor] = []
        self.services: list[ServiceDescriptor] = []
        self.hubs: list[HubDescriptor] = []

    def add(self, *types: TypeDescriptor) -> "TypeGap":
        self.types.extend(types)
        return self

    def add_service(self, service: ServiceDescriptor) -> "TypeGap":
        self.services.append(service)
        return self

    def add_hub(self, hub: HubDescriptor) -> "TypeGap":
        validate_hub(hub)
        self.hubs.append(hub)
        return self

    def translate(self) -> tuple[OutputModel, str]:
        """Run every generator and return the declaration model and stub text."""
        converter = TypeConverter(
            self.config.global_namespace,
            self.config.scalar_overrides,
            self.config.reserved_namespaces,
        )
        model = OutputModel(converter)
        translator = Translator(model)

        signatures = MethodSignatureGenerator(converter, translator, self.config.promise_type)
        services = ServiceGenerator(signatures, self.url_rewriter).write_services(self.services)
        hubs = HubGenerator(converter, translator).write_hubs(self.hubs)

        translator.process(self.types)

        stubs = "\n".join(part for part in (services, hubs) if part)
        return model, stubs

    def build(self) -> GeneratedOutput:
        model, stubs = self.translate()
        converter = model.converter
        return GeneratedOutput(
            definitions=render_definitions(model, converter),
            enums=render_enums(
                model,
                converter,
                const_enums=self.config.const_enums,
                global_root=self.config.global_root,
            ),
            services=stubs,
        )
