"""
Scaffolding - creates new MCP server projects from templates

Every template writes an ``mcp.json`` and ``mcp-tools.json`` that pass the
schema validator, a FastMCP ``server.py`` implementing the declared tools and
the packaging files needed to run it.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .schema_validator import CONFIG_FILE_NAME, TOOLS_FILE_NAME, SchemaValidator, kind_for_path
from .tool_definition_schema import (
    DEFAULT_TOOLS_PATH,
    SERVER_NAME_PATTERN,
    Capabilities,
    ToolBuilder,
    ToolCollection,
    ToolDefinition,
    TransportType,
    UIConfig,
    UIFormLayout,
    UIResultType,
)

TOOLS_SCHEMA_URL = "https://mcp-tool-shop.dev/schemas/mcp-tools.schema.json"
INITIAL_VERSION = "0.1.0"
MAX_SERVER_NAME_LENGTH = 64


class TemplateType(Enum):
    """Available project templates"""
    BASIC = "basic"
    WITH_UI = "with-ui"
    FULL = "full"


TEMPLATE_DESCRIPTIONS = {
    TemplateType.BASIC: "Simple MCP server with a hello world tool",
    TemplateType.WITH_UI: "MCP server with UI components (tables, charts)",
    TemplateType.FULL: "Full MCP server with tools, resources, and prompts",
}


@dataclass
class TemplateConfig:
    """Values substituted into a template"""
    name: str
    description: str = ""
    author: Optional[str] = None
    transport: TransportType = TransportType.STDIO
    capabilities: Capabilities = field(default_factory=Capabilities)

    @classmethod
    def for_template(cls, name: str, template: Union[TemplateType, str],
                     description: Optional[str] = None, author: Optional[str] = None,
                     transport: Union[TransportType, str] = TransportType.STDIO) -> "TemplateConfig":
        """Build a config with the capabilities a template implements"""
        full = TemplateType(template) == TemplateType.FULL
        return cls(
            name=name,
            description=description or f"{name} MCP server",
            author=author,
            transport=TransportType(transport),
            capabilities=Capabilities(tools=True, resources=full, prompts=full),
        )


@dataclass
class GeneratedFile:
    path: str
    content: str


@dataclass
class ScaffoldResult:
    """Outcome of scaffolding a project"""
    success: bool = True
    files_created: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.success = False


def validate_server_name(name: str) -> Optional[str]:
    """Return why a server name is unusable, or None when it is fine"""
    if not name:
        return "Name is required"
    if not re.match(SERVER_NAME_PATTERN, name):
        return "Name must start with lowercase letter and contain only lowercase letters, numbers, and hyphens"
    if len(name) > MAX_SERVER_NAME_LENGTH:
        return f"Name must be {MAX_SERVER_NAME_LENGTH} characters or less"
    return None


def get_template_description(template: Union[TemplateType, str]) -> str:
    return TEMPLATE_DESCRIPTIONS[TemplateType(template)]


# ============================================================================
# Tool collections
# ============================================================================

def _hello_tool() -> ToolDefinition:
    return (
        ToolBuilder("hello")
        .description("A simple hello world tool that greets the user")
        .parameter("name", "string", "The name to greet", required=True)
        .returns("text", "A greeting message")
        .example({"name": "World"}, "Hello, World!", "Greet a user")
        .build()
    )


def _ui_tools() -> List[ToolDefinition]:
    search = (
        ToolBuilder("searchData")
        .description("Search through data and display results in a table")
        .parameter("query", "string", "Search query", required=True)
        .parameter("limit", "number", "Maximum results to return", default=10)
        .returns("ui", "Search results displayed in a table")
        .ui(UIConfig(
            result_type=UIResultType.TABLE,
            layout=UIFormLayout.HORIZONTAL,
            submit_label="Search",
            title="Search Results",
            refreshable=True,
        ))
        .build()
    )
    stats = (
        ToolBuilder("getStats")
        .description("Get statistics and display as a chart")
        .parameter("period", "string", "Time period for stats",
                   required=True, enum=["day", "week", "month", "year"])
        .returns("ui", "Statistics displayed as a chart")
        .ui(UIConfig(
            result_type=UIResultType.CHART,
            title="Statistics",
            refreshable=True,
            expandable=True,
        ))
        .build()
    )
    return [search, stats]


def _to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


def _server_config_document(config: TemplateConfig) -> Dict[str, Any]:
    document: Dict[str, Any] = {
        "name": config.name,
        "version": INITIAL_VERSION,
        "description": config.description,
    }
    if config.author:
        document["author"] = config.author
    document["capabilities"] = config.capabilities.to_dict()
    document["transport"] = {"type": config.transport.value}
    document["tools"] = DEFAULT_TOOLS_PATH
    return document


def _tools_document(tools: List[ToolDefinition]) -> Dict[str, Any]:
    return ToolCollection(tools=tuple(tools), schema=TOOLS_SCHEMA_URL).to_dict()


# ============================================================================
# Python sources
# ============================================================================

_HELLO_SOURCE = '''

@mcp.tool()
def hello(name: str) -> str:
    """A simple hello world tool that greets the user"""
    return f"Hello, {name}!"
'''

_UI_SOURCE = '''
SAMPLE_ROWS = [
    {"id": 1, "title": "First item", "score": 0.9},
    {"id": 2, "title": "Second item", "score": 0.7},
    {"id": 3, "title": "Third item", "score": 0.4},
]


@mcp.tool(name="searchData")
def search_data(query: str, limit: int = 10) -> dict:
    """Search through data and display results in a table"""
    rows = [row for row in SAMPLE_ROWS if query.lower() in row["title"].lower()]
    return {"type": "table", "title": "Search Results", "rows": rows[:limit]}


@mcp.tool(name="getStats")
def get_stats(period: Literal["day", "week", "month", "year"]) -> dict:
    """Get statistics and display as a chart"""
    points = {"day": 24, "week": 7, "month": 30, "year": 12}[period]
    return {
        "type": "chart",
        "title": "Statistics",
        "series": [{"x": index, "y": index * index} for index in range(points)],
    }
'''

_RESOURCES_SOURCE = '''"""
Resources exposed by the server
"""

import json

CONFIG_URI = "data://example/config"


def register_resources(mcp):
    @mcp.resource(CONFIG_URI, name="Configuration", description="Current server configuration",
                  mime_type="application/json")
    def configuration() -> str:
        return json.dumps({"version": "0.1.0", "environment": "development"})
'''

_PROMPTS_SOURCE = '''"""
Prompts exposed by the server
"""


def register_prompts(mcp):
    @mcp.prompt(description="Summarize the provided content")
    def summarize(content: str, style: str = "brief") -> str:
        """Summary style is one of brief, detailed or bullets"""
        return f"Please provide a {style} summary of the following:\\n\\n{content}"
'''


def _server_source(config: TemplateConfig, template: TemplateType) -> str:
    lines = ['"""', f"{config.name} - MCP server", '"""', ""]
    if template != TemplateType.BASIC:
        lines.append("from typing import Literal")
        lines.append("")
    lines.append("from mcp.server.fastmcp import FastMCP")
    if template == TemplateType.FULL:
        lines.append("")
        lines.append("from prompts import register_prompts")
        lines.append("from resources import register_resources")
    lines.append("")
    lines.append(f"mcp = FastMCP({config.name!r}, instructions={config.description!r})")

    body = _HELLO_SOURCE if template == TemplateType.BASIC else _UI_SOURCE
    lines.append(body.rstrip("\n"))

    if template == TemplateType.FULL:
        lines.append("")
        lines.append("register_resources(mcp)")
        lines.append("register_prompts(mcp)")

    transport = "stdio" if config.transport == TransportType.STDIO else "streamable-http"
    lines.extend([
        "",
        "",
        "def main():",
        f"    mcp.run(transport={transport!r})",
        "",
        "",
        'if __name__ == "__main__":',
        "    main()",
    ])
    return "\n".join(lines) + "\n"


def _pyproject_source(config: TemplateConfig) -> str:
    lines = [
        "[build-system]",
        'requires = ["setuptools>=61.0"]',
        'build-backend = "setuptools.build_meta"',
        "",
        "[project]",
        f"name = {json.dumps(config.name)}",
        f'version = "{INITIAL_VERSION}"',
        f"description = {json.dumps(config.description)}",
    ]
    if config.author:
        lines.append(f"authors = [{{ name = {json.dumps(config.author)} }}]")
    lines.extend([
        'requires-python = ">=3.10"',
        'dependencies = ["mcp>=1.2.0"]',
        "",
        "[project.optional-dependencies]",
        'dev = ["mcp-app-builder"]',
        "",
        "[tool.setuptools]",
        'py-modules = ["server"]',
    ])
    return "\n".join(lines) + "\n"


def _readme_source(config: TemplateConfig, tools: List[ToolDefinition]) -> str:
    lines = [
        f"# {config.name}",
        "",
        config.description,
        "",
        "## Getting started",
        "",
        "```bash",
        "pip install -e .",
        "python server.py",
        "```",
        "",
        "## Tools",
        "",
    ]
    lines.extend(f"- `{tool.name}`: {tool.description}" for tool in tools)
    lines.extend([
        "",
        "## Development",
        "",
        "```bash",
        f"mcp-builder validate {TOOLS_FILE_NAME}",
        f"mcp-builder generate-types {TOOLS_FILE_NAME}",
        f"mcp-builder test {TOOLS_FILE_NAME} --config {CONFIG_FILE_NAME}",
        "```",
    ])
    return "\n".join(lines) + "\n"


def generate_template(template: Union[TemplateType, str], config: TemplateConfig) -> List[GeneratedFile]:
    """Render every file of a template, without touching the filesystem"""
    template = TemplateType(template)
    tools = [_hello_tool()] if template == TemplateType.BASIC else _ui_tools()

    files = [
        GeneratedFile(CONFIG_FILE_NAME, _to_json(_server_config_document(config))),
        GeneratedFile(TOOLS_FILE_NAME, _to_json(_tools_document(tools))),
        GeneratedFile("server.py", _server_source(config, template)),
        GeneratedFile("pyproject.toml", _pyproject_source(config)),
        GeneratedFile("README.md", _readme_source(config, tools)),
    ]

    if template == TemplateType.FULL:
        files.append(GeneratedFile("resources.py", _RESOURCES_SOURCE))
        files.append(GeneratedFile("prompts.py", _PROMPTS_SOURCE))

    return files


class Scaffolder:
    """Writes template files into a new project directory"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def scaffold(self, target: Union[str, Path], template: Union[TemplateType, str],
                 config: TemplateConfig) -> ScaffoldResult:
        """Create the project; per-file failures are collected on the result"""
        target = Path(target)
        template = TemplateType(template)
        result = ScaffoldResult()

        self.logger.info(f"Scaffolding {template.value} template in {target}")

        name_error = validate_server_name(config.name)
        if name_error:
            result.add_error(name_error)
            return result

        if target.exists() and (not target.is_dir() or any(target.iterdir())):
            result.add_error(f"Target {target} already exists and is not empty")
            return result

        files = generate_template(template, config)
        for path, message in self._document_errors(files):
            result.add_error(f"{path}: {message}")
        if not result.success:
            return result

        for generated in files:
            try:
                self._write_file(target, generated)
                result.files_created.append(generated.path)
                self.logger.debug(f"Created: {generated.path}")
            except OSError as e:
                result.add_error(f"Failed to create {generated.path}: {e}")

        if result.success:
            self.logger.info(f"Successfully created {len(result.files_created)} files")
        else:
            self.logger.error(f"Scaffolding completed with {len(result.errors)} errors")

        return result

    def _write_file(self, base: Path, generated: GeneratedFile):
        file_path = base / generated.path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(generated.content, encoding="utf-8")

    def _document_errors(self, files: List[GeneratedFile]) -> List[Tuple[str, str]]:
        """Validate the rendered MCP documents before anything is written"""
        validator = SchemaValidator()
        errors = []
        for generated in files:
            kind = kind_for_path(generated.path)
            if kind is None:
                continue
            result = validator.validate(kind, generated.content)
            errors.extend((generated.path, f"{issue.path}: {issue.message}") for issue in result.errors)
        return errors
