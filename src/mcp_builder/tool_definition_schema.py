"""
Tool Definition Format - data model and JSON schemas for MCP server documents

Two documents describe an MCP server project: the server config (``mcp.json``)
and the tool collection (``mcp-tools.json``). This module holds the typed model
both are turned into, plus the Draft-7 JSON schemas the validator checks them
against.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


IDENTIFIER_PATTERN = r"^[a-z][a-zA-Z0-9_]*$"
SERVER_NAME_PATTERN = r"^[a-z][a-z0-9-]*$"
SEMVER_PATTERN = r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?(\+[a-zA-Z0-9.-]+)?$"

DEFAULT_TOOLS_PATH = "./mcp-tools.json"


class _Missing:
    """Marker for an absent ``default`` (``None`` is a legal default)"""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class ParameterType(Enum):
    """Parameter types a tool can declare"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ValidationFormat(Enum):
    """String formats for the parameter validation facet"""
    EMAIL = "email"
    URI = "uri"
    DATE = "date"
    DATE_TIME = "date-time"
    UUID = "uuid"


class ReturnType(Enum):
    """Kinds of content a tool returns"""
    TEXT = "text"
    JSON = "json"
    IMAGE = "image"
    RESOURCE = "resource"
    UI = "ui"


class UIResultType(Enum):
    """How a UI host should render a tool result"""
    TEXT = "text"
    TABLE = "table"
    CHART = "chart"
    FORM = "form"
    CARD = "card"
    CUSTOM = "custom"


class UIFormLayout(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    GRID = "grid"


class TransportType(Enum):
    """Server transports"""
    STDIO = "stdio"
    HTTP = "http"
    WEBSOCKET = "websocket"


# ============================================================================
# Tool collection model
# ============================================================================

@dataclass(frozen=True)
class ParameterConstraint:
    """Parameter validation facet"""
    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[ValidationFormat] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterConstraint":
        fmt = data.get("format")
        return cls(
            min=data.get("min"),
            max=data.get("max"),
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            pattern=data.get("pattern"),
            format=ValidationFormat(fmt) if fmt is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result: Dict[str, Any] = {}
        if self.min is not None:
            result["min"] = self.min
        if self.max is not None:
            result["max"] = self.max
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.format is not None:
            result["format"] = self.format.value
        return result


@dataclass(frozen=True)
class ParameterDefinition:
    """
    One input slot of a tool.

    Parameters nest: an ``array`` parameter describes its elements through
    ``items`` and an ``object`` parameter its fields through ``properties``.
    Every nested definition belongs to exactly one parent, so the structure
    is always a tree.
    """
    name: str
    type: ParameterType
    description: str
    required: bool = False
    default: Any = MISSING
    enum: Tuple[str, ...] = ()
    items: Optional["ParameterDefinition"] = None
    properties: Optional[Mapping[str, "ParameterDefinition"]] = None
    constraints: Optional[ParameterConstraint] = None

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: Optional[str] = None) -> "ParameterDefinition":
        """Build a parameter tree from its parsed JSON form"""
        items = data.get("items")
        properties = data.get("properties")
        validation = data.get("validation")

        return cls(
            name=data.get("name", name),
            type=ParameterType(data["type"]),
            description=data.get("description", ""),
            required=bool(data.get("required", False)),
            default=copy.deepcopy(data["default"]) if "default" in data else MISSING,
            enum=tuple(data.get("enum") or ()),
            items=cls.from_dict(items) if items is not None else None,
            properties=(
                {key: cls.from_dict(value, name=key) for key, value in properties.items()}
                if properties is not None else None
            ),
            constraints=ParameterConstraint.from_dict(validation) if validation is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
        }

        if self.required:
            result["required"] = True
        if self.has_default:
            result["default"] = copy.deepcopy(self.default)
        if self.enum:
            result["enum"] = list(self.enum)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.properties is not None:
            result["properties"] = {key: prop.to_dict() for key, prop in self.properties.items()}
        if self.constraints is not None:
            constraints = self.constraints.to_dict()
            if constraints:
                result["validation"] = constraints

        return result


@dataclass(frozen=True)
class ReturnsDefinition:
    """Declared return shape of a tool"""
    type: ReturnType
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "description": self.description}


@dataclass(frozen=True)
class ExampleDefinition:
    """Tool usage example"""
    input: Mapping[str, Any]
    output: Any = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"input": copy.deepcopy(dict(self.input)), "output": copy.deepcopy(self.output)}
        if self.description is not None:
            result = {"description": self.description, **result}
        return result


@dataclass(frozen=True)
class UIConfig:
    """Rendering hints for hosts that display tool results"""
    result_type: Optional[UIResultType] = None
    layout: Optional[UIFormLayout] = None
    submit_label: Optional[str] = None
    title: Optional[str] = None
    refreshable: Optional[bool] = None
    expandable: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UIConfig":
        input_form = data.get("inputForm") or {}
        result_display = data.get("resultDisplay") or {}
        result_type = data.get("resultType")
        layout = input_form.get("layout")
        return cls(
            result_type=UIResultType(result_type) if result_type is not None else None,
            layout=UIFormLayout(layout) if layout is not None else None,
            submit_label=input_form.get("submitLabel"),
            title=result_display.get("title"),
            refreshable=result_display.get("refreshable"),
            expandable=result_display.get("expandable"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.result_type is not None:
            result["resultType"] = self.result_type.value

        input_form = {}
        if self.layout is not None:
            input_form["layout"] = self.layout.value
        if self.submit_label is not None:
            input_form["submitLabel"] = self.submit_label
        if input_form:
            result["inputForm"] = input_form

        result_display = {}
        for key, value in (("title", self.title),
                           ("refreshable", self.refreshable),
                           ("expandable", self.expandable)):
            if value is not None:
                result_display[key] = value
        if result_display:
            result["resultDisplay"] = result_display

        return result


@dataclass(frozen=True)
class ToolDefinition:
    """A named callable operation exposed by an MCP server"""
    name: str
    description: str
    parameters: Tuple[ParameterDefinition, ...] = ()
    returns: Optional[ReturnsDefinition] = None
    examples: Tuple[ExampleDefinition, ...] = ()
    ui: Optional[UIConfig] = None

    @property
    def required_parameters(self) -> List[ParameterDefinition]:
        return [param for param in self.parameters if param.required]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolDefinition":
        returns = data.get("returns")
        ui = data.get("ui")
        return cls(
            name=data["name"],
            description=data["description"],
            parameters=tuple(ParameterDefinition.from_dict(p) for p in data.get("parameters", [])),
            returns=(
                ReturnsDefinition(type=ReturnType(returns["type"]), description=returns["description"])
                if returns is not None else None
            ),
            examples=tuple(
                ExampleDefinition(
                    input=copy.deepcopy(example.get("input", {})),
                    output=copy.deepcopy(example.get("output")),
                    description=example.get("description"),
                )
                for example in data.get("examples") or []
            ),
            ui=UIConfig.from_dict(ui) if ui is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "parameters": [param.to_dict() for param in self.parameters],
        }

        # Only include optional fields if they have values
        if self.returns is not None:
            result["returns"] = self.returns.to_dict()
        if self.examples:
            result["examples"] = [example.to_dict() for example in self.examples]
        if self.ui is not None:
            result["ui"] = self.ui.to_dict()

        return result


@dataclass(frozen=True)
class ToolCollection:
    """Contents of an ``mcp-tools.json`` document"""
    tools: Tuple[ToolDefinition, ...] = ()
    schema: Optional[str] = None

    def __len__(self) -> int:
        return len(self.tools)

    def __iter__(self):
        return iter(self.tools)

    @property
    def tool_names(self) -> List[str]:
        return [tool.name for tool in self.tools]

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Look a tool up by name; the first definition wins"""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolCollection":
        return cls(
            tools=tuple(ToolDefinition.from_dict(tool) for tool in data.get("tools", [])),
            schema=data.get("$schema"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.schema is not None:
            result["$schema"] = self.schema
        result["tools"] = [tool.to_dict() for tool in self.tools]
        return result


# ============================================================================
# Server config model
# ============================================================================

@dataclass(frozen=True)
class Capabilities:
    """MCP capabilities a server advertises"""
    tools: bool = True
    resources: bool = False
    prompts: bool = False
    logging: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "tools": self.tools,
            "resources": self.resources,
            "prompts": self.prompts,
            "logging": self.logging,
        }


@dataclass(frozen=True)
class TransportOptions:
    port: Optional[int] = None
    host: str = "localhost"
    path: Optional[str] = None
    tls: bool = False


@dataclass(frozen=True)
class TransportConfig:
    type: TransportType = TransportType.STDIO
    options: Optional[TransportOptions] = None


@dataclass(frozen=True)
class ServerConfig:
    """Contents of an ``mcp.json`` document, defaults applied"""
    name: str
    version: str
    description: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    repository: Optional[str] = None
    capabilities: Capabilities = field(default_factory=Capabilities)
    transport: TransportConfig = field(default_factory=TransportConfig)
    tools: str = DEFAULT_TOOLS_PATH

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerConfig":
        capabilities = data.get("capabilities") or {}
        transport = data.get("transport") or {}
        options = transport.get("options")

        return cls(
            name=data["name"],
            version=data["version"],
            description=data.get("description"),
            author=data.get("author"),
            license=data.get("license"),
            repository=data.get("repository"),
            capabilities=Capabilities(
                tools=capabilities.get("tools", True),
                resources=capabilities.get("resources", False),
                prompts=capabilities.get("prompts", False),
                logging=capabilities.get("logging", False),
            ),
            transport=TransportConfig(
                type=TransportType(transport.get("type", TransportType.STDIO.value)),
                options=TransportOptions(
                    port=options.get("port"),
                    host=options.get("host", "localhost"),
                    path=options.get("path"),
                    tls=options.get("tls", False),
                ) if options is not None else None,
            ),
            tools=data.get("tools", DEFAULT_TOOLS_PATH),
        )


# ============================================================================
# JSON schemas
# ============================================================================

class ToolDefinitionSchema:
    """JSON Schema definitions for MCP server documents"""

    SCHEMA_VERSION = "1.0.0"

    @classmethod
    def get_validation_schema(cls) -> Dict[str, Any]:
        """Get JSON schema for the parameter validation facet"""
        return {
            "type": "object",
            "properties": {
                "min": {"type": "number"},
                "max": {"type": "number"},
                "minLength": {"type": "integer"},
                "maxLength": {"type": "integer"},
                "pattern": {"type": "string"},
                "format": {
                    "type": "string",
                    "enum": [fmt.value for fmt in ValidationFormat]
                }
            }
        }

    @classmethod
    def get_parameter_schema(cls) -> Dict[str, Any]:
        """Get JSON schema for parameter definitions (self-referential)"""
        return {
            "type": "object",
            "required": ["name", "type", "description"],
            "properties": {
                "name": {
                    "type": "string",
                    "pattern": IDENTIFIER_PATTERN
                },
                "type": {
                    "type": "string",
                    "enum": [param_type.value for param_type in ParameterType]
                },
                "description": {"type": "string"},
                "required": {
                    "type": "boolean",
                    "default": False
                },
                "default": {},
                "enum": {
                    "type": "array",
                    "items": {"type": "string"}
                },
                "items": {"$ref": "#/definitions/parameter"},
                "properties": {
                    "type": "object",
                    "additionalProperties": {"$ref": "#/definitions/parameter"}
                },
                "validation": cls.get_validation_schema()
            }
        }

    @classmethod
    def get_example_schema(cls) -> Dict[str, Any]:
        """Get JSON schema for example definitions"""
        return {
            "type": "object",
            "required": ["input"],
            "properties": {
                "description": {"type": "string"},
                "input": {"type": "object"},
                "output": {}
            }
        }

    @classmethod
    def get_ui_schema(cls) -> Dict[str, Any]:
        """Get JSON schema for tool UI hints"""
        return {
            "type": "object",
            "properties": {
                "resultType": {
                    "type": "string",
                    "enum": [result_type.value for result_type in UIResultType]
                },
                "inputForm": {
                    "type": "object",
                    "properties": {
                        "layout": {
                            "type": "string",
                            "enum": [layout.value for layout in UIFormLayout]
                        },
                        "submitLabel": {"type": "string"}
                    }
                },
                "resultDisplay": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "refreshable": {"type": "boolean"},
                        "expandable": {"type": "boolean"}
                    }
                }
            }
        }

    @classmethod
    def get_tool_schema(cls) -> Dict[str, Any]:
        """Get JSON schema for a single tool definition"""
        return {
            "type": "object",
            "required": ["name", "description", "parameters"],
            "properties": {
                "name": {
                    "type": "string",
                    "pattern": IDENTIFIER_PATTERN,
                    "minLength": 1,
                    "maxLength": 64,
                    "description": "Unique tool identifier"
                },
                "description": {
                    "type": "string",
                    "minLength": 10,
                    "maxLength": 1000,
                    "description": "Tool description for AI understanding"
                },
                "parameters": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/parameter"}
                },
                "returns": {
                    "type": "object",
                    "required": ["type", "description"],
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": [return_type.value for return_type in ReturnType]
                        },
                        "description": {"type": "string"}
                    }
                },
                "examples": {
                    "type": "array",
                    "items": cls.get_example_schema()
                },
                "ui": cls.get_ui_schema()
            }
        }

    @classmethod
    def get_tools_file_schema(cls) -> Dict[str, Any]:
        """Get complete JSON schema for ``mcp-tools.json``"""
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "MCP Tool Collection",
            "version": cls.SCHEMA_VERSION,
            "type": "object",
            "required": ["tools"],
            "properties": {
                "$schema": {"type": "string"},
                "tools": {
                    "type": "array",
                    "items": cls.get_tool_schema()
                }
            },
            "definitions": {
                "parameter": cls.get_parameter_schema()
            }
        }

    @classmethod
    def get_config_schema(cls) -> Dict[str, Any]:
        """Get complete JSON schema for ``mcp.json``"""
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "MCP Server Configuration",
            "version": cls.SCHEMA_VERSION,
            "type": "object",
            "required": ["name", "version"],
            "properties": {
                "name": {
                    "type": "string",
                    "pattern": SERVER_NAME_PATTERN,
                    "minLength": 1,
                    "maxLength": 64
                },
                "version": {
                    "type": "string",
                    "pattern": SEMVER_PATTERN
                },
                "description": {
                    "type": "string",
                    "maxLength": 500
                },
                "author": {"type": "string"},
                "license": {"type": "string"},
                "repository": {
                    "type": "string",
                    "format": "uri"
                },
                "capabilities": {
                    "type": "object",
                    "properties": {
                        "tools": {"type": "boolean", "default": True},
                        "resources": {"type": "boolean", "default": False},
                        "prompts": {"type": "boolean", "default": False},
                        "logging": {"type": "boolean", "default": False}
                    }
                },
                "transport": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": [transport.value for transport in TransportType],
                            "default": TransportType.STDIO.value
                        },
                        "options": {
                            "type": "object",
                            "properties": {
                                "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                                "host": {"type": "string", "default": "localhost"},
                                "path": {"type": "string"},
                                "tls": {"type": "boolean", "default": False}
                            }
                        }
                    }
                },
                "tools": {
                    "type": "string",
                    "default": DEFAULT_TOOLS_PATH
                }
            }
        }


# ============================================================================
# Builders and exports
# ============================================================================

class ToolBuilder:
    """Fluent builder for creating tool definitions in code"""

    def __init__(self, name: str):
        self._name = name
        self._description = ""
        self._parameters: List[ParameterDefinition] = []
        self._returns: Optional[ReturnsDefinition] = None
        self._examples: List[ExampleDefinition] = []
        self._ui: Optional[UIConfig] = None

    def description(self, desc: str) -> 'ToolBuilder':
        """Set tool description"""
        self._description = desc
        return self

    def parameter(self, name: str, param_type: Union[ParameterType, str], description: str,
                  required: bool = False, default: Any = MISSING,
                  enum: Optional[List[str]] = None,
                  items: Optional[ParameterDefinition] = None,
                  properties: Optional[Dict[str, ParameterDefinition]] = None,
                  constraints: Optional[ParameterConstraint] = None) -> 'ToolBuilder':
        """Add parameter definition"""
        param = ParameterDefinition(
            name=name,
            type=ParameterType(param_type),
            description=description,
            required=required,
            default=default,
            enum=tuple(enum or ()),
            items=items,
            properties=properties,
            constraints=constraints
        )
        self._parameters.append(param)
        return self

    def returns(self, return_type: Union[ReturnType, str], description: str) -> 'ToolBuilder':
        """Set return shape"""
        self._returns = ReturnsDefinition(type=ReturnType(return_type), description=description)
        return self

    def example(self, input_params: Dict[str, Any], output: Any = None,
                description: Optional[str] = None) -> 'ToolBuilder':
        """Add usage example"""
        self._examples.append(ExampleDefinition(input=input_params, output=output, description=description))
        return self

    def ui(self, ui_config: UIConfig) -> 'ToolBuilder':
        """Set UI rendering hints"""
        self._ui = ui_config
        return self

    def build(self) -> ToolDefinition:
        """Build and validate the tool definition"""
        # Imported here: the validator module depends on this one
        from .schema_validator import DocumentKind, SchemaValidator

        definition = ToolDefinition(
            name=self._name,
            description=self._description,
            parameters=tuple(self._parameters),
            returns=self._returns,
            examples=tuple(self._examples),
            ui=self._ui
        )

        result = SchemaValidator().validate_data(DocumentKind.TOOLS, {"tools": [definition.to_dict()]})
        if not result.valid:
            raise ValueError(
                "Tool definition validation failed: "
                + "; ".join(f"{issue.path}: {issue.message}" for issue in result.errors)
            )

        return definition


def to_input_schema(definition: ToolDefinition) -> Dict[str, Any]:
    """Generate the JSON schema an MCP server advertises as a tool's inputSchema"""
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {},
        "required": []
    }

    for param in definition.parameters:
        schema["properties"][param.name] = _parameter_json_schema(param)
        if param.required:
            schema["required"].append(param.name)

    return schema


def _parameter_json_schema(param: ParameterDefinition) -> Dict[str, Any]:
    param_schema: Dict[str, Any] = {
        "type": param.type.value,
        "description": param.description
    }

    if param.enum:
        param_schema["enum"] = list(param.enum)
    if param.has_default:
        param_schema["default"] = copy.deepcopy(param.default)
    if param.items is not None:
        param_schema["items"] = _parameter_json_schema(param.items)
    if param.properties is not None:
        param_schema["properties"] = {
            key: _parameter_json_schema(prop) for key, prop in param.properties.items()
        }
        nested_required = [key for key, prop in param.properties.items() if prop.required]
        if nested_required:
            param_schema["required"] = nested_required

    if param.constraints:
        if param.constraints.min is not None:
            param_schema["minimum"] = param.constraints.min
        if param.constraints.max is not None:
            param_schema["maximum"] = param.constraints.max
        if param.constraints.min_length is not None:
            param_schema["minLength"] = param.constraints.min_length
        if param.constraints.max_length is not None:
            param_schema["maxLength"] = param.constraints.max_length
        if param.constraints.pattern:
            param_schema["pattern"] = param.constraints.pattern
        if param.constraints.format is not None:
            param_schema["format"] = param.constraints.format.value

    return param_schema
