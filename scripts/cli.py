# SPDX-License-Identifier: GPL-3.0-only
"""Nkey provider CLI.

A local host for the provider resources. Resource addresses take the form
``<type_name>.<name>``, e.g. ``nats_nkey.operator``.
"""

import argparse
import json
import sys

from cryptography.fernet import InvalidToken
from peewee import DatabaseError

from base_logger import get_logger
from src.db_models import ResourceState
from src.operations import (
    ConfigureRequest,
    CreateRequest,
    DeleteRequest,
    ImportStateRequest,
    ReadRequest,
    UpdateRequest,
    ValidateConfigRequest,
)
from src.provider import NatsProvider, UnknownResourceTypeError
from src.state import Config, Plan
from src.state_store import (
    StateEncryptionRequiredError,
    delete_state,
    load_state,
    save_state,
)
from src.utils import create_tables

logger = get_logger("nkey.cli")

STATE_ERRORS = (
    StateEncryptionRequiredError,
    InvalidToken,
    DatabaseError,
    OSError,
    ValueError,
)


class CLIError(Exception):
    """Raised when a command cannot be completed."""


def parse_address(provider, address):
    """Split ``address`` into (type_name, name)."""
    type_name, _, name = address.partition(".")
    if not name:
        raise CLIError(
            f"Invalid resource address '{address}'. Expected <type_name>.<name>."
        )
    try:
        provider.get_resource(type_name)
    except UnknownResourceTypeError as e:
        raise CLIError(e.args[0]) from e
    return type_name, name


def report(diagnostics):
    """Print diagnostics to stderr and return True if any is an error."""
    for diagnostic in diagnostics:
        print(str(diagnostic), file=sys.stderr)
    return diagnostics.has_error()


def render(state, show_sensitive=False):
    """Render state values as JSON."""
    values = state.values if show_sensitive else state.redacted()
    return json.dumps(values, indent=2, sort_keys=True)


def apply(provider, address, key_type=None):
    """Create or update the resource at ``address``.

    Returns:
        tuple: (state or None, diagnostics)
    """
    type_name, _ = parse_address(provider, address)
    schema = provider.get_schema(type_name)

    configure_response = provider.call(type_name, "Configure", ConfigureRequest())
    if configure_response.diagnostics.has_error():
        return None, configure_response.diagnostics

    config = Config(schema, {"type": key_type})
    validation = provider.call(
        type_name, "ValidateConfig", ValidateConfigRequest(config=config)
    )
    if validation.diagnostics.has_error():
        return None, validation.diagnostics

    prior_state = load_state(address, schema)
    planned = schema.apply_defaults(config.values)

    if prior_state is None:
        response = provider.call(
            type_name, "Create", CreateRequest(plan=Plan(schema, planned), config=config)
        )
    else:
        plan_values = dict(prior_state.values)
        plan_values["type"] = planned["type"]
        response = provider.call(
            type_name,
            "Update",
            UpdateRequest(
                plan=Plan(schema, plan_values), state=prior_state, config=config
            ),
        )

    if response.diagnostics.has_error():
        return None, response.diagnostics

    save_state(address, type_name, response.state)
    return response.state, response.diagnostics


def show(provider, address):
    """Read the resource at ``address``."""
    type_name, _ = parse_address(provider, address)
    prior_state = load_state(address, provider.get_schema(type_name))
    if prior_state is None:
        raise CLIError(f"No state found for {address}.")

    response = provider.call(type_name, "Read", ReadRequest(state=prior_state))
    if response.diagnostics.has_error():
        return None, response.diagnostics

    save_state(address, type_name, response.state)
    return response.state, response.diagnostics


def import_resource(provider, address, resource_id):
    """Import an existing resource identifier at ``address``."""
    type_name, _ = parse_address(provider, address)
    if load_state(address, provider.get_schema(type_name)) is not None:
        raise CLIError(f"Resource already managed at {address}.")

    response = provider.call(
        type_name, "ImportState", ImportStateRequest(id=resource_id)
    )
    if response.diagnostics.has_error():
        return None, response.diagnostics

    read_response = provider.call(
        type_name, "Read", ReadRequest(state=response.state)
    )
    response.diagnostics.extend(read_response.diagnostics)
    if read_response.diagnostics.has_error():
        return None, response.diagnostics

    save_state(address, type_name, read_response.state)
    return read_response.state, response.diagnostics


def destroy(provider, address):
    """Delete the resource at ``address``."""
    type_name, _ = parse_address(provider, address)
    prior_state = load_state(address, provider.get_schema(type_name))
    if prior_state is None:
        raise CLIError(f"No state found for {address}.")

    response = provider.call(type_name, "Delete", DeleteRequest(state=prior_state))
    if response.diagnostics.has_error():
        return None, response.diagnostics

    delete_state(address)
    return response.state, response.diagnostics


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description="Nkey provider CLI")
    subparsers = parser.add_subparsers(
        dest="command", description="Expected commands", required=True
    )

    schema_parser = subparsers.add_parser("schema", help="Prints resource schemas.")
    schema_parser.add_argument(
        "type_name", nargs="?", type=str, help="Resource type name."
    )

    apply_parser = subparsers.add_parser(
        "apply", help="Creates or updates a resource."
    )
    apply_parser.add_argument("address", type=str, help="Resource address.")
    apply_parser.add_argument(
        "-t", "--type", dest="key_type", type=str, help="Nkey type.", default=None
    )

    show_parser = subparsers.add_parser("show", help="Shows a resource.")
    show_parser.add_argument("address", type=str, help="Resource address.")
    show_parser.add_argument(
        "--show-sensitive",
        action="store_true",
        help="Print sensitive values in plain text.",
    )

    import_parser = subparsers.add_parser("import", help="Imports a resource.")
    import_parser.add_argument("address", type=str, help="Resource address.")
    import_parser.add_argument("id", type=str, help="Resource identifier.")

    destroy_parser = subparsers.add_parser("destroy", help="Deletes a resource.")
    destroy_parser.add_argument("address", type=str, help="Resource address.")

    return parser


def main(argv=None):
    """Entry function"""

    args = build_parser().parse_args(argv)
    provider = NatsProvider()

    if args.command == "schema":
        type_names = (
            [args.type_name] if args.type_name else provider.resource_type_names()
        )
        try:
            schemas = {
                name: provider.get_schema(name).to_dict() for name in type_names
            }
        except UnknownResourceTypeError as e:
            logger.error(e.args[0])
            return 1
        print(json.dumps(schemas, indent=2))
        return 0

    show_sensitive = False
    try:
        create_tables([ResourceState])
        if args.command == "apply":
            state, diagnostics = apply(provider, args.address, args.key_type)
        elif args.command == "show":
            state, diagnostics = show(provider, args.address)
            show_sensitive = args.show_sensitive
        elif args.command == "import":
            state, diagnostics = import_resource(provider, args.address, args.id)
        else:
            state, diagnostics = destroy(provider, args.address)
    except CLIError as e:
        logger.error(str(e))
        return 1
    except STATE_ERRORS as e:
        logger.error(
            "State for %s could not be processed: %s",
            args.address,
            str(e) or type(e).__name__,
        )
        return 1

    if report(diagnostics):
        return 1

    if state is not None and not state.is_null:
        print(render(state, show_sensitive=show_sensitive))
    else:
        logger.info("%s destroyed.", args.address)
    return 0


if __name__ == "__main__":
    sys.exit(main())
