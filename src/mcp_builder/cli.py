"""
Command Line Interface for MCP App Builder
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import get_config
from .logger import setup_logger
from .schema_validator import (
    DocumentKind,
    SchemaValidator,
    ToolCollectionError,
    ValidationResult,
    attach_positions,
    kind_for_path,
    parse_server_config,
    parse_tool_collection,
)
from .scaffolding import Scaffolder, TemplateConfig, TemplateType
from .testing import SimulatedInvoker, TestGenerator, TestRunner, format_suite_report, load_invoker
from .tool_definition_schema import TransportType
from .type_generator import TypeGenerator

logger = logging.getLogger("mcp_builder")


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser"""

    parser = argparse.ArgumentParser(
        prog="mcp-builder",
        description="MCP App Builder - validate, type, test and scaffold MCP servers",
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version=f"MCP App Builder v{__version__}"
    )

    # Logging options
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging"
    )

    # Configuration options
    parser.add_argument(
        "--config-file",
        type=str,
        default="mcp-builder.json",
        help="Builder configuration file (default: mcp-builder.json)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate an mcp.json or mcp-tools.json file")
    validate_parser.add_argument("file", help="Document to validate")
    validate_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in DocumentKind],
        help="Document kind (default: inferred from the file name)"
    )

    types_parser = subparsers.add_parser("generate-types", help="Generate Python types from a tools file")
    types_parser.add_argument("tools_file", help="Tool collection document")
    types_parser.add_argument("-o", "--output", help="Output module path")

    test_parser = subparsers.add_parser("test", help="Derive and run test cases for a tools file")
    test_parser.add_argument("tools_file", help="Tool collection document")
    test_parser.add_argument("--config", dest="server_config", help="Server config (mcp.json) used for the report")
    test_parser.add_argument("--invoker", help="Invocation callable as module:attribute (default: simulated)")
    test_parser.add_argument("--timeout", type=float, help="Per-case timeout in seconds")

    new_parser = subparsers.add_parser("new-server", help="Scaffold a new MCP server project")
    new_parser.add_argument("name", help="Server name (lowercase letters, digits and hyphens)")
    new_parser.add_argument(
        "--template",
        choices=[template.value for template in TemplateType],
        default=TemplateType.BASIC.value,
        help="Project template (default: basic)"
    )
    new_parser.add_argument(
        "--transport",
        choices=[TransportType.STDIO.value, TransportType.HTTP.value],
        default=TransportType.STDIO.value,
        help="Server transport (default: stdio)"
    )
    new_parser.add_argument("--description", help="Server description")
    new_parser.add_argument("--author", help="Server author")
    new_parser.add_argument("--target", help="Target directory (default: ./NAME)")

    return parser


def print_diagnostics(file_path: str, result: ValidationResult):
    """Print issues as ``FILE:line:col: severity: path: message``"""
    for severity, issues in (("error", result.errors), ("warning", result.warnings)):
        for issue in issues:
            line = (issue.line or 0) + 1
            column = (issue.column or 0) + 1
            location = issue.path or "<document>"
            print(f"{file_path}:{line}:{column}: {severity}: {location}: {issue.message}")


def cmd_validate(args) -> int:
    validator = SchemaValidator()
    config = get_config()

    if args.kind:
        content = Path(args.file).read_text(encoding="utf-8")
        result = attach_positions(content, validator.validate(args.kind, content))
    else:
        if kind_for_path(args.file, config.validation.config_file_name,
                         config.validation.tools_file_name) is None:
            logger.error(f"❌ Cannot tell what kind of document {args.file} is, pass --kind")
            return 2
        result = validator.validate_file(
            args.file,
            config_file_name=config.validation.config_file_name,
            tools_file_name=config.validation.tools_file_name,
        )

    print_diagnostics(args.file, result)

    if result.valid:
        logger.info(f"✅ {args.file} is valid ({len(result.warnings)} warning(s))")
        return 0

    logger.error(f"❌ {args.file} has {len(result.errors)} error(s)")
    return 1


def cmd_generate_types(args) -> int:
    tools_path = Path(args.tools_file)
    config = get_config()

    try:
        collection = parse_tool_collection(tools_path.read_text(encoding="utf-8"))
    except ToolCollectionError as e:
        attach_positions(tools_path.read_text(encoding="utf-8"), e.result)
        print_diagnostics(args.tools_file, e.result)
        logger.error(f"❌ Cannot generate types: {e}")
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = tools_path.parent / config.generation.output_dir / config.generation.output_file

    generated = TypeGenerator().write(collection, output_path)
    logger.info(f"✅ Generated types for {generated.tool_count} tools: {output_path}")
    return 0


def cmd_test(args) -> int:
    config = get_config()
    tools_path = Path(args.tools_file)

    try:
        collection = parse_tool_collection(tools_path.read_text(encoding="utf-8"))
    except ToolCollectionError as e:
        attach_positions(tools_path.read_text(encoding="utf-8"), e.result)
        print_diagnostics(args.tools_file, e.result)
        logger.error(f"❌ Cannot run tests: {e}")
        return 1

    server_config = None
    if args.server_config:
        server_config = parse_server_config(Path(args.server_config).read_text(encoding="utf-8"))

    timeout = args.timeout if args.timeout is not None else config.testing.default_timeout
    invoker_reference = args.invoker or config.testing.invoker
    if invoker_reference:
        invoke = load_invoker(invoker_reference)
    else:
        invoke = SimulatedInvoker(latency=config.testing.simulated_latency)

    tests = TestGenerator(default_timeout=timeout).generate_from_tools(collection)
    suite = asyncio.run(TestRunner().run_tests(tests, invoke, context=server_config))
    print(format_suite_report(suite, tests, server_config))

    return 0 if suite.failed == 0 else 1


def cmd_new_server(args) -> int:
    template = TemplateType(args.template)
    target = Path(args.target) if args.target else Path.cwd() / args.name

    template_config = TemplateConfig.for_template(
        args.name,
        template,
        description=args.description,
        author=args.author,
        transport=args.transport,
    )
    result = Scaffolder().scaffold(target, template, template_config)

    if not result.success:
        for error in result.errors:
            logger.error(f"❌ {error}")
        return 1

    for file_path in result.files_created:
        logger.info(f"📁 Created: {file_path}")
    logger.info(f"✅ Server {args.name} created in {target}")
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "generate-types": cmd_generate_types,
    "test": cmd_test,
    "new-server": cmd_new_server,
}


def main(argv: Optional[List[str]] = None):
    """Main entry point for MCP App Builder"""

    parser = create_parser()
    args = parser.parse_args(argv)

    # Load configuration, then let the environment and flags override it
    config = get_config()
    config.load_config(args.config_file)
    config.apply_env_vars()

    if args.debug:
        config.debug = True
        config.log_level = "DEBUG"
    elif args.log_level:
        config.log_level = args.log_level

    setup_logger(
        log_level=config.log_level,
        log_file=args.log_file,
        debug=config.debug
    )

    try:
        exit_code = COMMANDS[args.command](args)
    except KeyboardInterrupt:
        logger.info("👋 Interrupted")
        exit_code = 130
    except Exception as e:
        logger.error(f"❌ {args.command} failed: {e}")
        if config.debug:
            logger.exception("Traceback:")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
