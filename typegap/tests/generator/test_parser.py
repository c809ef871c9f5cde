"""Tests for metadata parser."""

import os

import pytest
from lark.exceptions import LarkError

from typegap.generator import parse
from typegap.generator.parser import ValidationError
from typegap.generator.types import HttpVerb, ParameterSource, TypeKind

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_parse_namespace():
    def parses_enum(expect):
        metadata = parse(
            """
            namespace Acme {
                enum Color { Red = 0, Green = 1, Blue = -1 }
            }
        """
        )
        expect(len(metadata.types)) == 1
        color = metadata.types[0]
        expect(color.kind) == TypeKind.ENUM
        expect(color.full_name) == "Acme.Color"
        expect([(m.name, m.value) for m in color.enum_members]) == [
            ("Red", 0),
            ("Green", 1),
            ("Blue", -1),
        ]

    def parses_class_members(expect):
        metadata = parse(
            """
            namespace Acme {
                # A point
                class Point {
                    x: double
                    y: double
                    label: string?
                    @ignore cache: object
                }
            }
        """
        )
        point = metadata.types[0]
        expect(point.kind) == TypeKind.CLASS
        expect([m.name for m in point.members]) == ["x", "y", "label", "cache"]
        expect(point.members[0].type.kind) == TypeKind.PRIMITIVE
        expect(point.members[2].type.kind) == TypeKind.OPTIONAL
        expect(point.members[2].type.generic_arguments[0].kind) == TypeKind.STRING
        expect(point.members[3].ignored) == True

    def parses_builtin_wrappers(expect):
        metadata = parse(
            """
            namespace Acme {
                class Bag {
                    ids: Guid[]
                    names: List<string>
                    lookup: Dictionary<int, string>
                    maybe: Nullable<int>
                }
            }
        """
        )
        ids, names, lookup, maybe = metadata.types[0].members
        expect(ids.type.kind) == TypeKind.ARRAY
        expect(ids.type.element_type.full_name) == "System.Guid"
        expect(names.type.kind) == TypeKind.COLLECTION
        expect(lookup.type.kind) == TypeKind.DICTIONARY
        expect(maybe.type.kind) == TypeKind.OPTIONAL

    def parses_generic_definition_and_instantiation(expect):
        metadata = parse(
            """
            namespace Acme {
                class Page<T> { items: T[] }
                class User { name: string }
                class Directory { users: Page<User> }
            }
        """
        )
        page, user, directory = metadata.types
        expect(page.type_parameters) == ["T"]
        expect(page.members[0].type.element_type.kind) == TypeKind.GENERIC_PARAMETER

        users = directory.members[0].type
        expect(users.name) == "Page"
        expect(users.generic_arguments) == [user]
        expect(users.members) == page.members

    def resolves_bases_and_forward_references(expect):
        metadata = parse(
            """
            namespace Acme {
                class User : Entity { manager: User }
                class Entity { id: Guid }
            }
        """
        )
        user, entity = metadata.types
        expect(user.bases) == [entity]
        expect(user.members[0].type) == user

    def resolves_names_across_namespaces(expect):
        metadata = parse(
            """
            namespace Acme.Sales { class Order { customer: Customer } }
            namespace Acme.Crm { class Customer { orders: Acme.Sales.Order[] } }
        """
        )
        order, customer = metadata.types
        expect(order.members[0].type) == customer
        expect(customer.members[0].type.element_type) == order

    def marks_synthesized_types(expect):
        metadata = parse("namespace Acme { @synthesized class Closure { } }")
        expect(metadata.types[0].synthesized) == True

    def parses_interface_methods(expect):
        metadata = parse(
            """
            namespace Acme {
                interface IClient {
                    Notify(text: string, count: int): void
                }
            }
        """
        )
        client = metadata.types[0]
        expect(client.kind) == TypeKind.INTERFACE
        expect(client.methods[0].name) == "Notify"
        expect([p.name for p in client.methods[0].parameters]) == ["text", "count"]
        expect(client.methods[0].return_type.kind) == TypeKind.VOID


def describe_parse_service():
    def parses_actions(expect):
        with open(f"{FILE_DIR}/api.tgap", encoding="utf-8") as f:
            metadata = parse(f.read())
        users = metadata.services[0]

        expect(users.name) == "Users"
        expect(users.route_template) == "/api/users"
        expect([m.method.name for m in users.methods]) == ["GetById", "Search", "Save", "Remove"]
        expect([m.verb for m in users.methods]) == [
            HttpVerb.GET,
            HttpVerb.GET,
            HttpVerb.POST,
            HttpVerb.DELETE,
        ]
        expect(users.methods[0].route) == "{id}"
        expect(users.methods[1].route) == None
        expect(users.methods[0].method.return_type.kind) == TypeKind.ASYNC_WRAPPER

    def parses_explicit_bindings(expect):
        metadata = parse(
            """
            namespace Acme { class Filter { text: string } }
            service Search "/api/search" {
                POST Run(@query filter: Filter, @body raw: string): int
            }
        """
        )
        params = metadata.services[0].methods[0].method.parameters
        expect(params[0].binding) == ParameterSource.QUERY
        expect(params[1].binding) == ParameterSource.BODY

    def allows_service_without_route(expect):
        metadata = parse("service Health { GET Ping(): void }")
        expect(metadata.services[0].route_template) == ""


def describe_parse_hub():
    def parses_client_contract(expect):
        with open(f"{FILE_DIR}/api.tgap", encoding="utf-8") as f:
            metadata = parse(f.read())
        hub = metadata.hubs[0]

        expect(hub.name) == "ChatHub"
        expect(hub.base_name) == "Hub"
        expect(hub.client_contract.full_name) == "Acme.Models.IChatClient"
        expect([m.name for m in hub.methods]) == ["Send", "History"]

    def excludes_client_contracts_from_roots(expect):
        with open(f"{FILE_DIR}/api.tgap", encoding="utf-8") as f:
            metadata = parse(f.read())

        names = [t.name for t in metadata.roots]
        expect("IChatClient" in names) == False
        expect("User" in names) == True

    def parses_hub_without_contract(expect):
        metadata = parse("hub Status { Ping(): void }")
        hub = metadata.hubs[0]
        expect(hub.client_contract) == None
        expect(hub.base_name) == "Hub"

    def keeps_declared_base_name(expect):
        metadata = parse("hub Status : Controller { Ping(): void }")
        expect(metadata.hubs[0].base_name) == "Controller"


def describe_validation():
    def rejects_unknown_type(expect):
        with pytest.raises(ValidationError) as exc:
            parse("namespace Acme { class User { address: Address } }")
        expect(str(exc.value)).includes("Unknown type Address")

    def rejects_duplicate_declaration(expect):
        with pytest.raises(ValidationError):
            parse("namespace Acme { class User { } class User { } }")

    def rejects_ambiguous_simple_name(expect):
        with pytest.raises(ValidationError) as exc:
            parse(
                """
                namespace A { class User { } }
                namespace B { class User { } }
                namespace C { class Holder { user: User } }
            """
            )
        expect(str(exc.value)).includes("ambiguous")

    def rejects_wrong_generic_arity(expect):
        with pytest.raises(ValidationError):
            parse("namespace Acme { class Bag { items: Dictionary<string> } }")
        with pytest.raises(ValidationError):
            parse("namespace Acme { class Page<T> { } class Holder { page: Page<int, int> } }")

    def rejects_duplicate_service_names(expect):
        with pytest.raises(ValidationError):
            parse("service Users { } hub Users { }")

    def rejects_two_bindings_on_one_parameter(expect):
        with pytest.raises(ValidationError):
            parse('service Users "/u" { GET Find(@query @route id: int): void }')

    def rejects_syntax_errors(expect):
        with pytest.raises(LarkError):
            parse("namespace Acme { class { } }")
