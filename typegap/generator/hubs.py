"""SignalR style hub client, server and proxy interfaces."""

from dataclasses import dataclass

from .converter import TypeConverter
from .emitter import env
from .methods import MethodSignatureGenerator
from .translator import GenerationError, Translator
from .types import HubDescriptor, MethodDescriptor, TypeKind
from .util import to_camel_case

template = env.get_template("hubs.ts.j2")

HUB_TYPE = "Microsoft.AspNet.SignalR.Hub"
HUB_PROMISE_TYPE = "ISignalRPromise"
CONNECTION_INTERFACE = "SignalR"


class UnresolvableHubTypeError(GenerationError):
    """Raised when a hub descriptor does not describe a hub."""


@dataclass
class _Hub:
    name: str
    key: str
    client_methods: list[str] | None
    server_methods: list[str]


def is_hub_base(base_name: str) -> bool:
    """Check if a declared base type name refers to the hub base type."""
    return base_name == "Hub" or base_name.endswith(".Hub") or HUB_TYPE in base_name


def validate_hub(hub: HubDescriptor) -> None:
    """Reject a hub whose declared base or client contract is malformed."""
    if not is_hub_base(hub.base_name):
        raise UnresolvableHubTypeError(
            f"{hub.name} does not appear to be a hub: it derives from {hub.base_name}"
        )
    contract = hub.client_contract
    if contract is not None and contract.kind not in (TypeKind.CLASS, TypeKind.INTERFACE):
        raise UnresolvableHubTypeError(
            f"{hub.name} declares {contract.identity} as its client contract, "
            f"but it is a {contract.kind.value}"
        )


class HubGenerator:
    """Render the interfaces describing each hub and the shared connection."""

    def __init__(self, converter: TypeConverter, translator: Translator):
        self.signatures = MethodSignatureGenerator(converter, translator, HUB_PROMISE_TYPE)

    def _methods(self, methods: list[MethodDescriptor] | tuple[MethodDescriptor, ...]) -> list[str]:
        return [self.signatures.generate(m) for m in sorted(methods, key=lambda m: m.name)]

    def hub(self, hub: HubDescriptor) -> _Hub:
        client_methods = None
        if hub.client_contract is not None:
            client_methods = self._methods(hub.client_contract.methods)
        return _Hub(
            name=hub.name,
            key=to_camel_case(hub.name),
            client_methods=client_methods,
            server_methods=self._methods(hub.methods),
        )

    def write_hubs(self, hubs: list[HubDescriptor]) -> str:
        """Render every hub; all hubs are validated before anything is translated."""
        for hub in hubs:
            validate_hub(hub)

        rendered = [self.hub(hub) for hub in hubs]
        return template.render(
            hubs=rendered,
            promise_type=HUB_PROMISE_TYPE,
            connection_name=CONNECTION_INTERFACE,
            BLANK_LINE="",
        )
