"""Tests for the fluent generator entry point."""

import pytest

from typegap.generator import GENERATED_NOTICE, GeneratorConfig, TypeGap
from typegap.generator.hubs import UnresolvableHubTypeError
from typegap.generator.types import (
    HttpVerb,
    HubDescriptor,
    MethodDescriptor,
    Parameter,
    ServiceDescriptor,
    ServiceMethod,
    TypeMember,
    async_of,
    class_type,
    enum_type,
    primitive,
    string_type,
)


def user_model():
    status = enum_type("Status", "Acme", {"Active": 1, "Banned": 2})
    user = class_type(
        "User",
        "Acme",
        [TypeMember("name", string_type()), TypeMember("status", status)],
    )
    return user, status


def users_service(user):
    return ServiceDescriptor(
        "Users",
        "/api/users",
        (
            ServiceMethod(
                MethodDescriptor("GetById", (Parameter("id", primitive("int")),), async_of(user)),
                HttpVerb.GET,
                "{id}",
            ),
        ),
    )


def describe_build():
    def builds_all_artifacts(expect):
        user, _ = user_model()
        output = TypeGap().add_service(users_service(user)).build()

        expect(output.definitions).includes("declare namespace Acme {")
        expect(output.definitions).includes("        status: Acme.Status;\n")
        expect(output.enums).includes("    export const enum Status {\n")
        expect(output.enums).includes("        Banned = 2,\n")
        expect(output.services).includes("    getById(id: number): Promise<Acme.User>;\n")

    def builds_from_root_types(expect):
        user, status = user_model()
        output = TypeGap().add(user, status).build()

        expect(output.definitions).includes("interface User {")
        expect(output.services) == ""

    def joins_services_and_hubs(expect):
        user, _ = user_model()
        hub = HubDescriptor(
            "PresenceHub",
            None,
            (MethodDescriptor("Join", (Parameter("user", user),), async_of()),),
        )
        output = TypeGap().add_service(users_service(user)).add_hub(hub).build()

        services_at = output.services.index("export interface Users")
        hubs_at = output.services.index("interface IPresenceHub {")
        expect(services_at < hubs_at) == True
        expect(output.services).includes("    join(user: Acme.User): void;\n")

    def emits_runtime_enums(expect):
        user, _ = user_model()
        output = TypeGap(GeneratorConfig(const_enums=False, global_root="self")).add(user).build()

        expect("const enum" in output.enums) == False
        expect(output.enums).includes("const wnd: any = self;\n")
        expect(output.enums).includes("wnd.Acme.Status = Acme.Status;\n")

    def wraps_declarations_in_global_namespace(expect):
        user, _ = user_model()
        output = TypeGap(GeneratorConfig(global_namespace="Api")).add_service(users_service(user)).build()

        expect(output.definitions).includes("declare namespace Api {")
        expect(output.services).includes("Promise<Api.User>")

    def applies_configured_url_rewrites(expect):
        user, _ = user_model()
        config = GeneratorConfig(url_rewrites={"/api/": "/gateway/api/"})
        output = TypeGap(config).add_service(users_service(user)).build()

        expect(output.services).includes('route: "/gateway/api/users/{id}"')

    def explicit_url_rewriter_wins(expect):
        user, _ = user_model()
        config = GeneratorConfig(url_rewrites={"/api/": "/gateway/api/"})
        output = TypeGap(config, lambda url: url.upper()).add_service(users_service(user)).build()

        expect(output.services).includes('route: "/API/USERS/{id}"')

    def uses_configured_scalar_overrides(expect):
        money = class_type("Money", "Acme.Finance")
        invoice = class_type("Invoice", "Acme", [TypeMember("total", money)])
        config = GeneratorConfig(scalar_overrides={"Acme.Finance.Money": "number"})
        output = TypeGap(config).add(invoice).build()

        expect(output.definitions).includes("total: number;")
        expect("interface Money" in output.definitions) == False

    def uses_configured_reserved_namespaces(expect):
        widget = class_type("Widget", "Vendor.Controls")
        page = class_type("Page", "Acme", [TypeMember("widget", widget)])
        config = GeneratorConfig(reserved_namespaces=["Vendor"])
        output = TypeGap(config).add(page).build()

        expect(output.definitions).includes("widget: any;")
        expect("interface Widget" in output.definitions) == False

    def rejects_invalid_hub_on_add(expect):
        hub = HubDescriptor("Broken", None, (), base_name="ApiController")

        with pytest.raises(UnresolvableHubTypeError):
            TypeGap().add_hub(hub)


def describe_files():
    def prefixes_generated_notice(expect):
        user, _ = user_model()
        output = TypeGap().add(user).build()
        files = output.files(GeneratorConfig())

        expect(sorted(files)) == ["definitions.d.ts", "enums.ts", "services.ts"]
        for content in files.values():
            expect(content.startswith(GENERATED_NOTICE + "\n\n")) == True

    def uses_configured_file_names(expect):
        user, _ = user_model()
        output = TypeGap().add(user).build()
        config = GeneratorConfig(definitions_file="types.d.ts", enums_file="consts.ts")

        expect(sorted(output.files(config))) == ["consts.ts", "services.ts", "types.d.ts"]
