"""
Schema validation for MCP server documents

Validation runs in two passes. The structural pass checks the parsed document
against the JSON schema and collects every violation; the semantic pass runs
only on structurally valid documents, so its rules can rely on a well-typed
tree. Expected invalidity never raises: it is reported in a ValidationResult.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import urlparse

from jsonschema import Draft7Validator, FormatChecker

from .tool_definition_schema import ServerConfig, ToolCollection, ToolDefinitionSchema

CONFIG_FILE_NAME = "mcp.json"
TOOLS_FILE_NAME = "mcp-tools.json"


class DocumentKind(Enum):
    """Which top-level schema a document is checked against"""
    CONFIG = "config"
    TOOLS = "tools"


@dataclass
class ValidationIssue:
    """A single error or warning, located by a dotted field path"""
    path: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"path": self.path, "message": self.message}
        if self.line is not None:
            result["line"] = self.line
            result["column"] = self.column
        return result


@dataclass
class ValidationResult:
    """Outcome of validating one document"""
    valid: bool = True
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def add_error(self, path: str, message: str):
        self.errors.append(ValidationIssue(path=path, message=message))
        self.valid = False

    def add_warning(self, path: str, message: str):
        self.warnings.append(ValidationIssue(path=path, message=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


@dataclass(frozen=True)
class SourcePosition:
    """Zero-based position of a diagnostic in the source text"""
    line: int
    column: int
    length: int = 0


class SchemaValidationError(ValueError):
    """Raised when a document must be valid before further processing"""

    def __init__(self, message: str, result: ValidationResult):
        super().__init__(message)
        self.result = result


class ToolCollectionError(SchemaValidationError):
    """Tool collection document failed validation"""
    pass


class ServerConfigError(SchemaValidationError):
    """Server config document failed validation"""
    pass


def _build_format_checker() -> FormatChecker:
    checker = FormatChecker(formats=())

    @checker.checks("uri")
    def is_uri(instance: Any) -> bool:
        if not isinstance(instance, str):
            return True
        parsed = urlparse(instance)
        return bool(parsed.scheme and parsed.netloc)

    return checker


def _format_path(path: Sequence[Union[str, int]]) -> str:
    return ".".join(str(part) for part in path)


def _path_sort_key(path: Sequence[Union[str, int]]):
    # Array indexes compare numerically, keys lexically, never against each other
    return [(0, part, "") if isinstance(part, int) else (1, 0, str(part)) for part in path]


class SchemaValidator:
    """Validates MCP server config and tool collection documents"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        format_checker = _build_format_checker()
        self._validators = {
            DocumentKind.CONFIG: Draft7Validator(
                ToolDefinitionSchema.get_config_schema(), format_checker=format_checker
            ),
            DocumentKind.TOOLS: Draft7Validator(
                ToolDefinitionSchema.get_tools_file_schema(), format_checker=format_checker
            ),
        }

    def validate(self, kind: Union[DocumentKind, str], content: Union[str, bytes]) -> ValidationResult:
        """Parse and validate raw document text"""
        kind = DocumentKind(kind)

        try:
            data = json.loads(content)
        except (ValueError, TypeError, RecursionError) as e:
            self.logger.debug(f"Document is not valid JSON: {e}")
            result = ValidationResult()
            result.add_error("", str(e) or "Invalid JSON")
            return result

        return self.validate_data(kind, data)

    def validate_config(self, content: Union[str, bytes]) -> ValidationResult:
        """Validate an ``mcp.json`` document"""
        return self.validate(DocumentKind.CONFIG, content)

    def validate_tools(self, content: Union[str, bytes]) -> ValidationResult:
        """Validate an ``mcp-tools.json`` document"""
        return self.validate(DocumentKind.TOOLS, content)

    def validate_data(self, kind: Union[DocumentKind, str], data: Any) -> ValidationResult:
        """Validate an already parsed document"""
        kind = DocumentKind(kind)
        result = ValidationResult()

        try:
            for path, message in self._structural_issues(self._validators[kind], data):
                result.add_error(path, message)

            if result.valid and kind == DocumentKind.TOOLS:
                self._check_tool_semantics(data, result)
        except RecursionError:
            self.logger.warning(f"Gave up validating {kind.value} document: nesting is too deep")
            result = ValidationResult()
            result.add_error("", "Document nesting is too deep")
            return result

        self.logger.debug(
            f"Validated {kind.value} document: {len(result.errors)} error(s), "
            f"{len(result.warnings)} warning(s)"
        )
        return result

    def validate_file(self, file_path: Union[str, Path],
                      config_file_name: str = CONFIG_FILE_NAME,
                      tools_file_name: str = TOOLS_FILE_NAME) -> ValidationResult:
        """Validate a file, picking the schema from its name"""
        file_path = Path(file_path)
        kind = kind_for_path(file_path, config_file_name, tools_file_name)

        if kind is None:
            self.logger.debug(f"Skipping {file_path}: not an MCP document")
            return ValidationResult()

        self.logger.debug(f"Validating {file_path}")
        content = file_path.read_text(encoding="utf-8")
        result = self.validate(kind, content)
        attach_positions(content, result)
        return result

    def _structural_issues(self, validator: Draft7Validator, data: Any) -> List[tuple]:
        """Collect every schema violation as (dotted path, message)"""
        issues = []
        reported_required = set()

        for error in validator.iter_errors(data):
            path = list(error.absolute_path)

            if error.validator == "required":
                # jsonschema reports each missing field separately; emit them
                # once per object, located at the missing field itself
                key = tuple(path)
                if key in reported_required:
                    continue
                reported_required.add(key)
                for name in error.validator_value:
                    if isinstance(error.instance, dict) and name not in error.instance:
                        issues.append((path + [name], "Required field is missing"))
                continue

            issues.append((path, error.message))

        issues.sort(key=lambda issue: _path_sort_key(issue[0]))
        return [(_format_path(path), message) for path, message in issues]

    def _check_tool_semantics(self, data: Mapping[str, Any], result: ValidationResult):
        """Cross-field rules for a structurally valid tool collection"""
        tool_names = set()

        for tool in data["tools"]:
            name = tool["name"]
            if name in tool_names:
                result.add_error(f"tools.{name}", f"Duplicate tool name: {name}")
            tool_names.add(name)

            for param in tool["parameters"]:
                param_path = f"tools.{name}.parameters.{param['name']}"
                if param.get("required", False) and "default" in param:
                    result.add_warning(param_path, "Required parameter has a default value")
                self._check_parameter_shape(param, param_path, result)

    def _check_parameter_shape(self, param: Mapping[str, Any], path: str, result: ValidationResult):
        """Warn about nested schemas that the declared type ignores"""
        param_type = param["type"]

        if "items" in param:
            if param_type != "array":
                result.add_warning(f"{path}.items", f"'items' is ignored for {param_type} parameters")
            self._check_parameter_shape(param["items"], f"{path}.items", result)

        if "properties" in param:
            if param_type != "object":
                result.add_warning(f"{path}.properties", f"'properties' is ignored for {param_type} parameters")
            for key, prop in param["properties"].items():
                self._check_parameter_shape(prop, f"{path}.properties.{key}", result)


def kind_for_path(file_path: Union[str, Path],
                  config_file_name: str = CONFIG_FILE_NAME,
                  tools_file_name: str = TOOLS_FILE_NAME) -> Optional[DocumentKind]:
    """Map a file name to the document kind it holds"""
    name = Path(file_path).name
    if name.endswith(tools_file_name):
        return DocumentKind.TOOLS
    if name.endswith(config_file_name):
        return DocumentKind.CONFIG
    return None


def locate_path(content: str, path: str) -> SourcePosition:
    """
    Approximate the source position of a dotted path.

    Heuristic: the last path segment is searched as a quoted JSON key and the
    first occurrence in the document wins. Without a match (or for the empty
    path) the position is the start of the document.
    """
    if not path:
        return SourcePosition(0, 0, 0)

    search_key = path.split(".")[-1]
    match = re.search(rf'"{re.escape(search_key)}"\s*:', content)
    if not match:
        return SourcePosition(0, 0, 0)

    offset = match.start()
    line = content.count("\n", 0, offset)
    column = offset - (content.rfind("\n", 0, offset) + 1)
    return SourcePosition(line, column, len(match.group(0)))


def attach_positions(content: str, result: ValidationResult) -> ValidationResult:
    """Fill line/column on every issue of a result"""
    for issue in result.errors + result.warnings:
        position = locate_path(content, issue.path)
        issue.line = position.line
        issue.column = position.column
    return result


def parse_tool_collection(content: Union[str, bytes],
                          validator: Optional[SchemaValidator] = None) -> ToolCollection:
    """Validate a tool collection and build the model, refusing invalid input"""
    validator = validator or SchemaValidator()
    result = validator.validate_tools(content)
    if not result.valid:
        raise ToolCollectionError(
            f"Tool collection has {len(result.errors)} error(s)", result
        )
    return ToolCollection.from_dict(json.loads(content))


def parse_server_config(content: Union[str, bytes],
                        validator: Optional[SchemaValidator] = None) -> ServerConfig:
    """Validate a server config and build the model, refusing invalid input"""
    validator = validator or SchemaValidator()
    result = validator.validate_config(content)
    if not result.valid:
        raise ServerConfigError(
            f"Server config has {len(result.errors)} error(s)", result
        )
    return ServerConfig.from_dict(json.loads(content))
