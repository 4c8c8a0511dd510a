"""
Admin CLI for inspecting resource schemas and drafts offline.

Usage:
    python -m doof_admin.cli.admin_cli columns --resource <type> [--config <path>]
    python -m doof_admin.cli.admin_cli diff --resource <type> --original <file> --draft <file>
    python -m doof_admin.cli.admin_cli validate-new --resource <type> --draft <file>
    python -m doof_admin.cli.admin_cli extract-zip --address "<address>"
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from doof_admin.config import EngineConfig
from doof_admin.core.diff_engine import build_create_payload, compute_changes
from doof_admin.core.models import ResourceSchema
from doof_admin.core.normalizers import FieldValidationError
from doof_admin.core.rules import check_create_requirements, load_resource_schemas
from doof_admin.engine.location_resolver import extract_zipcode
from doof_admin.observability.logger import get_logger
from doof_admin.utils.validation import validate_resource_type

logger = get_logger(__name__)


def load_document(path: str) -> dict[str, Any]:
    """Load a JSON or YAML mapping from a file."""
    with open(path, "r") as f:
        if path.endswith(".yaml") or path.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return data


def resolve_schema(args) -> ResourceSchema:
    config_path = args.config or EngineConfig.from_env().resource_config
    schemas = load_resource_schemas(config_path)
    resource_type = validate_resource_type(args.resource, known_types=schemas)
    return schemas[resource_type]


def columns_command(args):
    """
    List the columns of a resource.

    Args:
        args: Command line arguments
    """
    schema = resolve_schema(args)

    print(f"\n{'=' * 80}")
    print(f"COLUMNS: {schema.resource_type}")
    print(f"{'=' * 80}\n")
    print(f"{'Key':<22} {'Kind':<18} {'Editable':<9} {'Required':<9} {'Format'}")
    print(f"{'-' * 80}")

    for column in schema.columns:
        editable = "yes" if column.is_editable else "-"
        required = "yes" if column.required else "-"
        print(f"{column.key:<22} {column.kind.value:<18} {editable:<9} {required:<9} {column.format or '-'}")

    if schema.create_requires:
        print(f"\nRequired on create: {', '.join(schema.create_requires)}")
    if schema.create_requires_positive:
        print(f"Positive id required on create: {', '.join(schema.create_requires_positive)}")
    print()


def diff_command(args) -> int:
    """
    Print the changed fields between a record and a draft.

    Returns:
        Exit code (1 when the draft is invalid)
    """
    schema = resolve_schema(args)
    original = load_document(args.original)
    draft = load_document(args.draft)

    result = compute_changes(original, draft, schema.columns)
    if not result.is_valid:
        print(f"\nInvalid draft ({result.field}): {result.error}")
        return 1

    if result.is_empty:
        print("\nNo changes.")
        return 0

    print(json.dumps(result.changes, indent=2, default=str))
    return 0


def validate_new_command(args) -> int:
    """
    Check a new-row draft and print the create payload.

    Returns:
        Exit code (1 when the draft is invalid)
    """
    schema = resolve_schema(args)
    draft = load_document(args.draft)

    try:
        check_create_requirements(schema, draft)
        payload = build_create_payload(draft, schema.columns)
    except FieldValidationError as e:
        print(f"\nInvalid new row ({e.field_name}): {e.message}")
        return 1

    print(json.dumps(payload, indent=2, default=str))
    return 0


def extract_zip_command(args) -> int:
    zipcode = extract_zipcode(args.address)
    if zipcode is None:
        print("No zipcode found.")
        return 1
    print(zipcode)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Admin CLI for the doof admin table engine",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # columns command
    columns_parser = subparsers.add_parser(
        "columns",
        help="List the columns of a resource"
    )
    columns_parser.add_argument("--resource", required=True, help="Resource type (e.g. restaurants)")
    columns_parser.add_argument("--config", help="Resource YAML file (default: packaged resources.yaml)")

    # diff command
    diff_parser = subparsers.add_parser(
        "diff",
        help="Show the changes a draft would save"
    )
    diff_parser.add_argument("--resource", required=True, help="Resource type")
    diff_parser.add_argument("--original", required=True, help="JSON or YAML file with the stored record")
    diff_parser.add_argument("--draft", required=True, help="JSON or YAML file with the draft values")
    diff_parser.add_argument("--config", help="Resource YAML file")

    # validate-new command
    new_parser = subparsers.add_parser(
        "validate-new",
        help="Validate a new-row draft and show its create payload"
    )
    new_parser.add_argument("--resource", required=True, help="Resource type")
    new_parser.add_argument("--draft", required=True, help="JSON or YAML file with the draft values")
    new_parser.add_argument("--config", help="Resource YAML file")

    # extract-zip command
    zip_parser = subparsers.add_parser(
        "extract-zip",
        help="Extract the zipcode from an address"
    )
    zip_parser.add_argument("--address", required=True, help="Free-text address")

    return parser


def main(argv: list[str] | None = None):
    """Main entry point for admin CLI."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if hasattr(args, "config") and args.config:
        args.config = Path(args.config)

    # Route to command handler
    try:
        if args.command == "columns":
            columns_command(args)
            exit_code = 0
        elif args.command == "diff":
            exit_code = diff_command(args)
        elif args.command == "validate-new":
            exit_code = validate_new_command(args)
        elif args.command == "extract-zip":
            exit_code = extract_zip_command(args)
        else:
            parser.print_help()
            exit_code = 1

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)

    except Exception as e:
        logger.error(f"Error running {args.command}: {e}", exc_info=True)
        print(f"\nError: {e}")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
