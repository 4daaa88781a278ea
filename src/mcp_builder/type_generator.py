"""
Type Generator

Generates Python type declarations from MCP tool definitions: a TypedDict per
tool input, a Literal union of tool names, a handler Protocol and a dispatch
helper whose overloads bind each tool name to its input type.
"""

import json
import keyword
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Set, Tuple, Union

from .logger import PerformanceTimer
from .tool_definition_schema import (
    ParameterDefinition,
    ParameterType,
    ToolCollection,
    ToolDefinition,
)

HEADER = '''"""
Auto-generated types from MCP tool definitions.

Do not edit manually - regenerate with "mcp-builder generate-types".
"""'''

RESULT_IMPORT = "from mcp_builder.tool_result import ToolResult"

# Order of names in the generated ``from typing import ...`` line
TYPING_NAMES = (
    "Any", "Dict", "List", "Literal", "Mapping", "Never",
    "NotRequired", "Protocol", "TypedDict", "overload",
)


@dataclass
class GeneratedTypes:
    """Generated module source and the number of tools it covers"""
    content: str
    tool_count: int


@dataclass
class _GenerationContext:
    """Mutable state for one generate() call"""
    typing_names: Set[str] = field(default_factory=set)
    used_type_names: Set[str] = field(default_factory=set)

    def use(self, *names: str):
        self.typing_names.update(names)

    def claim(self, name: str) -> str:
        """Reserve a unique type name, suffixing a counter on collision"""
        candidate = name
        counter = 2
        while candidate in self.used_type_names:
            candidate = f"{name}{counter}"
            counter += 1
        self.used_type_names.add(candidate)
        return candidate


def _is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _pascal_case(value: str) -> str:
    words = [word for word in re.split(r"[^a-zA-Z0-9]+", value) if word]
    result = "".join(word[0].upper() + word[1:] for word in words)
    if not result or result[0].isdigit():
        result = f"Field{result}"
    return result


def _handler_name(tool_name: str) -> str:
    return f"{tool_name}_" if keyword.iskeyword(tool_name) else tool_name


def _escape_docstring(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _docstring(text: str, indent: str) -> List[str]:
    lines = _escape_docstring(text).splitlines() or [""]
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    return [f'{indent}"""{lines[0]}'] + [f"{indent}{line}" if line else "" for line in lines[1:]] + [f'{indent}"""']


def _comment(text: str, indent: str, marker: str = "#:") -> List[str]:
    return [f"{indent}{marker} {line}".rstrip() for line in (text.splitlines() or [""])]


class TypeGenerator:
    """Generates typed Python interfaces for a tool collection"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def generate(self, collection: Union[ToolCollection, Iterable[ToolDefinition]]) -> GeneratedTypes:
        """Generate the module source; output is stable for identical input"""
        tools = list(collection)
        self.logger.debug(f"Generating types for {len(tools)} tools")

        with PerformanceTimer("Type generation"):
            context = _GenerationContext()
            context.use("TypedDict")

            input_types: List[Tuple[ToolDefinition, str]] = []
            blocks: List[str] = []

            for tool in tools:
                input_name, tool_blocks = self._generate_tool_types(tool, context)
                input_types.append((tool, input_name))
                blocks.extend(tool_blocks)

            blocks.extend(self._generate_union_types(input_types, context))
            blocks.extend(self._generate_handler_interface(input_types, context))

            imports = [
                f"from typing import {', '.join(name for name in TYPING_NAMES if name in context.typing_names)}",
                "",
                RESULT_IMPORT,
            ]
            sections = ["\n".join(imports), self._dispatch_error_block()] + blocks
            content = HEADER + "\n\n" + "\n\n\n".join(sections) + "\n"

        return GeneratedTypes(content=content, tool_count=len(tools))

    def write(self, collection: Union[ToolCollection, Iterable[ToolDefinition]],
              output_path: Union[str, Path]) -> GeneratedTypes:
        """Generate and write the module to ``output_path``"""
        generated = self.generate(collection)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(generated.content, encoding="utf-8")
        self.logger.info(f"Generated types for {generated.tool_count} tools: {output_path}")
        return generated

    def parse_tools_file(self, content: Union[str, bytes]) -> ToolCollection:
        """Parse a tools document without full validation"""
        parsed = json.loads(content)

        if not isinstance(parsed, dict) or not isinstance(parsed.get("tools"), list):
            raise ValueError('Invalid tools file: missing "tools" array')

        return ToolCollection.from_dict(parsed)

    # ------------------------------------------------------------------
    # Per-tool declarations
    # ------------------------------------------------------------------

    def _generate_tool_types(self, tool: ToolDefinition,
                             context: _GenerationContext) -> Tuple[str, List[str]]:
        type_name = context.claim(_pascal_case(tool.name))
        input_name = context.claim(f"{type_name}Input")
        blocks: List[str] = []

        fields = []
        for param in tool.parameters:
            annotation = self._param_to_annotation(param, f"{input_name}{_pascal_case(param.name)}", context, blocks)
            fields.append((param.name, param, annotation))

        blocks.append(self._typed_dict_block(input_name, tool.description, fields, context))

        if tool.returns is not None:
            output_name = context.claim(f"{type_name}Output")
            blocks.append(f"{output_name} = ToolResult")

        return input_name, blocks

    def _typed_dict_block(self, name: str, description: str,
                          fields: List[Tuple[str, ParameterDefinition, str]],
                          context: _GenerationContext) -> str:
        def field_type(param: ParameterDefinition, annotation: str) -> str:
            if param.required:
                return annotation
            context.use("NotRequired")
            return f"NotRequired[{annotation}]"

        if all(_is_identifier(key) for key, _, _ in fields):
            lines = [f"class {name}(TypedDict):"]
            lines.extend(_docstring(description, "    "))
            for key, param, annotation in fields:
                lines.append("")
                lines.extend(_comment(param.description, "    "))
                lines.append(f"    {key}: {field_type(param, annotation)}")
            return "\n".join(lines)

        # Keys that are not identifiers need the functional syntax
        lines = _comment(description, "", marker="#")
        lines.append(f"{name} = TypedDict({name!r}, {{")
        for key, param, annotation in fields:
            lines.append(f"    {key!r}: {field_type(param, annotation)},")
        lines.append("})")
        return "\n".join(lines)

    def _param_to_annotation(self, param: ParameterDefinition, nested_name: str,
                             context: _GenerationContext, blocks: List[str]) -> str:
        """Map a parameter to a type annotation, emitting nested TypedDicts into ``blocks``"""
        if param.enum:
            context.use("Literal")
            return f"Literal[{', '.join(repr(value) for value in param.enum)}]"

        if param.type == ParameterType.STRING:
            return "str"
        if param.type == ParameterType.NUMBER:
            return "float"
        if param.type == ParameterType.BOOLEAN:
            return "bool"
        if param.type == ParameterType.ARRAY:
            context.use("List")
            if param.items is not None:
                item_type = self._param_to_annotation(param.items, f"{nested_name}Item", context, blocks)
                return f"List[{item_type}]"
            context.use("Any")
            return "List[Any]"
        if param.type == ParameterType.OBJECT:
            if param.properties is not None:
                record_name = context.claim(nested_name)
                fields = [
                    (key, prop, self._param_to_annotation(prop, f"{record_name}{_pascal_case(key)}", context, blocks))
                    for key, prop in param.properties.items()
                ]
                blocks.append(self._typed_dict_block(record_name, param.description, fields, context))
                return record_name
            context.use("Dict", "Any")
            return "Dict[str, Any]"

        context.use("Any")
        return "Any"

    # ------------------------------------------------------------------
    # Collection-wide declarations
    # ------------------------------------------------------------------

    def _generate_union_types(self, input_types: List[Tuple[ToolDefinition, str]],
                              context: _GenerationContext) -> List[str]:
        if input_types:
            context.use("Literal")
            names = ", ".join(repr(tool.name) for tool, _ in input_types)
            tool_name = f"#: All available tool names\nToolName = Literal[{names}]"
        else:
            context.use("Never")
            tool_name = "#: All available tool names\nToolName = Never"

        context.use("Dict", "Any")
        mapping = ["#: Map of tool names to their input types", "TOOL_INPUT_TYPES: Dict[str, Any] = {"]
        mapping.extend(f"    {tool.name!r}: {input_name}," for tool, input_name in input_types)
        mapping.append("}")

        handler_names = ["_HANDLER_NAMES: Dict[str, str] = {"]
        handler_names.extend(f"    {tool.name!r}: {_handler_name(tool.name)!r}," for tool, _ in input_types)
        handler_names.append("}")

        return [tool_name, "\n".join(mapping) + "\n\n" + "\n".join(handler_names)]

    def _generate_handler_interface(self, input_types: List[Tuple[ToolDefinition, str]],
                                    context: _GenerationContext) -> List[str]:
        context.use("Protocol")
        handlers = ["class ToolHandlers(Protocol):", '    """Interface for implementing tool handlers"""']
        for tool, input_name in input_types:
            handlers.append("")
            handlers.append(f"    async def {_handler_name(tool.name)}(self, input: {input_name}) -> ToolResult:")
            handlers.extend(_docstring(tool.description, "        "))
            handlers.append("        ...")

        caller = [
            "class ToolCaller:",
            '    """Type-safe tool call function"""',
            "",
            "    def __init__(self, handlers: ToolHandlers):",
            "        self._handlers = handlers",
            "",
        ]

        if len(input_types) == 1:
            tool, input_name = input_types[0]
            context.use("Literal")
            caller.append(
                f"    async def __call__(self, name: Literal[{tool.name!r}], input: {input_name}) -> ToolResult:"
            )
        else:
            if input_types:
                context.use("overload", "Literal")
            for tool, input_name in input_types:
                caller.append("    @overload")
                caller.append(
                    f"    async def __call__(self, name: Literal[{tool.name!r}], input: {input_name}) -> ToolResult: ..."
                )
                caller.append("")
            context.use("Mapping")
            caller.append("    async def __call__(self, name: str, input: Mapping[str, object]) -> ToolResult:")

        caller.extend([
            "        input_type = TOOL_INPUT_TYPES.get(name)",
            "        if input_type is None:",
            '            raise ToolDispatchError(f"Unknown tool: {name!r}")',
            "",
            "        keys = set(input)",
            "        missing = sorted(input_type.__required_keys__ - keys)",
            "        if missing:",
            "            raise ToolDispatchError(f\"Missing required input for {name!r}: {', '.join(missing)}\")",
            "",
            "        unexpected = sorted(keys - input_type.__required_keys__ - input_type.__optional_keys__)",
            "        if unexpected:",
            "            raise ToolDispatchError(f\"Unexpected input for {name!r}: {', '.join(unexpected)}\")",
            "",
            "        handler = getattr(self._handlers, _HANDLER_NAMES[name])",
            "        return await handler(input)",
        ])

        factory = [
            "def create_tool_caller(handlers: ToolHandlers) -> ToolCaller:",
            '    """Bind handlers to a type-safe tool call function"""',
            "    return ToolCaller(handlers)",
        ]

        return ["\n".join(handlers), "\n".join(caller), "\n".join(factory)]

    def _dispatch_error_block(self) -> str:
        return "\n".join([
            "class ToolDispatchError(TypeError):",
            '    """Tool name or input does not match the generated types"""',
        ])
