"""Client interfaces and dispatcher binding metadata for HTTP services."""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass

from .emitter import env
from .methods import MethodSignatureGenerator
from .translator import GenerationError
from .types import (
    BODY_VERBS,
    COMPLEX_KINDS,
    Parameter,
    ParameterSource,
    ServiceDescriptor,
    ServiceMethod,
    unwrap,
)
from .util import to_camel_case

template = env.get_template("services.ts.j2")

# Matches {name}, {name:constraint}, {name?} and {*name} route segments
_ROUTE_PARAM = re.compile(r"\{\*?([A-Za-z_][A-Za-z0-9_]*)[^}]*\}")


@dataclass
class _Stub:
    key: str
    signature: str
    binding: str


@dataclass
class _Service:
    name: str
    stubs: list[_Stub]


def route_parameters(route: str) -> set[str]:
    """Names of the parameters bound by a route template."""
    return {match.group(1).lower() for match in _ROUTE_PARAM.finditer(route)}


def combine_routes(service_route: str, method_route: str | None) -> str:
    """Join a service route and a method route.

    A method route starting with ``/`` or ``~/`` replaces the service route.
    """
    if method_route is None:
        return service_route
    if method_route.startswith("~/"):
        return method_route[1:]
    if method_route.startswith("/"):
        return method_route
    if not service_route:
        return method_route
    return f"{service_route.rstrip('/')}/{method_route}"


def bind_parameter(param: Parameter, service_method: ServiceMethod, route: str) -> ParameterSource:
    """Decide where a parameter travels in the request."""
    if param.binding is not None:
        return param.binding
    if param.name.lower() in route_parameters(route):
        return ParameterSource.ROUTE
    if unwrap(param.type).kind in COMPLEX_KINDS and service_method.verb in BODY_VERBS:
        return ParameterSource.BODY
    return ParameterSource.QUERY


class ServiceGenerator:
    """Render one interface and one binding table per service."""

    def __init__(
        self,
        signatures: MethodSignatureGenerator,
        url_rewriter: Callable[[str], str] | None = None,
    ):
        self.signatures = signatures
        self.url_rewriter = url_rewriter or (lambda url: url)

    def binding(self, service_method: ServiceMethod, route: str) -> str:
        """Render the dispatcher metadata for a method as an object literal."""
        method = service_method.method
        params = []
        body_params = []
        for param in method.parameters:
            source = bind_parameter(param, service_method, route)
            if source == ParameterSource.BODY:
                body_params.append(param.name)
            params.append(f"{{ name: {json.dumps(param.name)}, source: {json.dumps(source.value)} }}")

        if len(body_params) > 1:
            raise GenerationError(
                f"{method.name} binds more than one parameter to the request body: "
                + ", ".join(body_params)
            )

        return (
            f"{{ verb: {json.dumps(service_method.verb.value)}, "
            f"route: {json.dumps(route)}, "
            f"params: [{', '.join(params)}] }}"
        )

    def service(self, service: ServiceDescriptor) -> _Service:
        base_route = self.url_rewriter(service.route_template)
        stubs = []
        keys = set()
        for service_method in service.methods:
            key = to_camel_case(service_method.method.name)
            if key in keys:
                raise GenerationError(
                    f"{service.name}.{service_method.method.name} is overloaded; "
                    f"each method of a service needs a distinct name"
                )
            keys.add(key)

            route = combine_routes(base_route, service_method.route)
            stubs.append(
                _Stub(
                    key=key,
                    signature=self.signatures.generate(service_method.method),
                    binding=self.binding(service_method, route),
                )
            )
        return _Service(name=service.name, stubs=stubs)

    def write_services(self, services: list[ServiceDescriptor]) -> str:
        """Render every service; the referenced types are registered as a side effect."""
        rendered = [self.service(service) for service in services]
        return template.render(services=rendered, BLANK_LINE="")
