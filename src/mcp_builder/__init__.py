"""
MCP App Builder - tooling for Model Context Protocol servers

This package validates server config and tool collection documents, generates
typed Python interfaces from tool definitions, derives and runs test suites
against a tool invoker, and scaffolds new server projects.
"""

__version__ = "0.1.0"

from .logger import setup_logger, get_performance_logger, PerformanceTimer
from .config import Config, get_config
from .tool_definition_schema import (
    MISSING,
    ParameterType,
    ParameterDefinition,
    ParameterConstraint,
    ToolDefinition,
    ToolCollection,
    ServerConfig,
    ToolBuilder,
    ToolDefinitionSchema,
)
from .tool_result import ToolResult, TextContent, ImageContent, ResourceContent, UIContent
from .schema_validator import (
    DocumentKind,
    SchemaValidator,
    ValidationIssue,
    ValidationResult,
    SchemaValidationError,
    ToolCollectionError,
    ServerConfigError,
    parse_tool_collection,
    parse_server_config,
)
from .type_generator import TypeGenerator, GeneratedTypes
from .scaffolding import Scaffolder, ScaffoldResult, TemplateConfig, TemplateType

__all__ = [
    "__version__",
    "setup_logger",
    "get_performance_logger",
    "PerformanceTimer",
    "Config",
    "get_config",
    "MISSING",
    "ParameterType",
    "ParameterDefinition",
    "ParameterConstraint",
    "ToolDefinition",
    "ToolCollection",
    "ServerConfig",
    "ToolBuilder",
    "ToolDefinitionSchema",
    "ToolResult",
    "TextContent",
    "ImageContent",
    "ResourceContent",
    "UIContent",
    "DocumentKind",
    "SchemaValidator",
    "ValidationIssue",
    "ValidationResult",
    "SchemaValidationError",
    "ToolCollectionError",
    "ServerConfigError",
    "parse_tool_collection",
    "parse_server_config",
    "TypeGenerator",
    "GeneratedTypes",
    "Scaffolder",
    "ScaffoldResult",
    "TemplateConfig",
    "TemplateType",
]
