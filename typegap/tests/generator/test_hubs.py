"""Tests for hub stubs."""

import pytest

from typegap.generator.converter import TypeConverter
from typegap.generator.hubs import HubGenerator, UnresolvableHubTypeError, validate_hub
from typegap.generator.translator import OutputModel, Translator
from typegap.generator.types import (
    HubDescriptor,
    MethodDescriptor,
    Parameter,
    TypeMember,
    async_of,
    class_type,
    collection_of,
    enum_type,
    interface_type,
    primitive,
    string_type,
    void_type,
)


def write(hubs):
    converter = TypeConverter()
    model = OutputModel(converter)
    text = HubGenerator(converter, Translator(model)).write_hubs(hubs)
    return text, model


def chat_hub(contract=True, base_name="Hub"):
    message = class_type("Message", "Acme", [TypeMember("text", string_type())])
    client = None
    if contract:
        client = interface_type("IChatClient", "Acme")
        client.methods.append(
            MethodDescriptor("Receive", (Parameter("message", message),), void_type())
        )
    return HubDescriptor(
        name="ChatHub",
        client_contract=client,
        methods=(
            MethodDescriptor("Send", (Parameter("text", string_type()),), async_of()),
            MethodDescriptor(
                "History", (Parameter("count", primitive("int")),), async_of(collection_of(message))
            ),
        ),
        base_name=base_name,
    )


def describe_write_hubs():
    def emits_shared_promise_interface(expect):
        text, _ = write([chat_hub()])

        expect(text).includes(
            "interface ISignalRPromise<T> {\n"
            "    done(cb: (result: T) => any): ISignalRPromise<T>;\n"
            "    error(cb: (error: any) => any): ISignalRPromise<T>;\n"
            "}\n"
        )

    def emits_client_interface_from_contract(expect):
        text, _ = write([chat_hub()])

        expect(text).includes(
            "interface IChatHubClient {\n" "    receive(message: Acme.Message): void;\n" "}\n"
        )

    def emits_server_interface_sorted_by_name(expect):
        text, _ = write([chat_hub()])

        expect(text).includes(
            "interface IChatHub {\n"
            "    history(count: number): ISignalRPromise<Acme.Message[]>;\n"
            "    send(text: string): void;\n"
            "}\n"
        )

    def emits_proxy_and_connection_interfaces(expect):
        text, _ = write([chat_hub()])

        expect(text).includes(
            "interface IChatHubProxy {\n"
            "    server: IChatHub;\n"
            "    client: IChatHubClient;\n"
            "}\n"
        )
        expect(text).includes("interface SignalR {\n" "    chatHub: IChatHubProxy;\n" "}\n")

    def emits_placeholder_without_client_contract(expect):
        text, _ = write([chat_hub(contract=False)])

        expect(text).includes(
            "interface IChatHubClient {\n"
            "    /* Client interface not generated as hub doesn't derive from Hub<T> */\n"
            "}\n"
        )

    def registers_referenced_types(expect):
        _, model = write([chat_hub()])

        expect(model.keys()) == [("Acme", "Message")]

    def renders_nothing_without_hubs(expect):
        text, _ = write([])

        expect(text) == ""


def describe_validation():
    def accepts_qualified_hub_base(expect):
        validate_hub(chat_hub(base_name="Microsoft.AspNet.SignalR.Hub"))

    def rejects_non_hub_base_before_translation(expect):
        converter = TypeConverter()
        model = OutputModel(converter)
        generator = HubGenerator(converter, Translator(model))

        with pytest.raises(UnresolvableHubTypeError) as exc:
            generator.write_hubs([chat_hub(), chat_hub(base_name="Controller")])

        expect(str(exc.value)).includes("Controller")
        expect(len(model)) == 0

    def rejects_non_interface_client_contract(expect):
        hub = HubDescriptor("ChatHub", enum_type("Mode", "Acme"), ())

        with pytest.raises(UnresolvableHubTypeError):
            validate_hub(hub)
