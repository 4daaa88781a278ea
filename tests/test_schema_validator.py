"""
Test suite for the MCP document schema validator
"""

import json

import pytest

from mcp_builder.schema_validator import (
    DocumentKind,
    SchemaValidationError,
    SchemaValidator,
    ServerConfigError,
    SourcePosition,
    ToolCollectionError,
    ValidationResult,
    attach_positions,
    kind_for_path,
    locate_path,
    parse_server_config,
    parse_tool_collection,
)
from mcp_builder.tool_definition_schema import ToolCollection


def make_tool(name="get_weather", description="Get the current weather for a city", parameters=None, **extra):
    tool = {"name": name, "description": description, "parameters": parameters or []}
    tool.update(extra)
    return tool


def tools_document(*tools):
    return json.dumps({"tools": list(tools)}, indent=2)


@pytest.fixture
def validator():
    return SchemaValidator()


class TestParsing:
    """Test handling of unparseable input"""

    def test_invalid_json(self, validator):
        result = validator.validate_tools("{not json")

        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0].path == ""
        assert result.warnings == []

    def test_non_object_document(self, validator):
        result = validator.validate_tools("[]")

        assert result.valid is False
        assert result.errors[0].path == ""

    def test_kind_accepts_string(self, validator):
        result = validator.validate("tools", tools_document(make_tool()))
        assert result.valid is True


class TestToolCollectionValidation:
    """Test structural and semantic rules for tool collections"""

    def test_valid_collection(self, validator):
        document = tools_document(make_tool(parameters=[
            {"name": "city", "type": "string", "description": "City name", "required": True},
            {"name": "days", "type": "number", "description": "Forecast days", "default": 3},
        ]))

        result = validator.validate_tools(document)

        assert result.valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_missing_tools_array(self, validator):
        result = validator.validate_tools("{}")

        assert result.valid is False
        assert [(issue.path, issue.message) for issue in result.errors] == [
            ("tools", "Required field is missing")
        ]

    def test_missing_tool_fields_reported_at_field_path(self, validator):
        result = validator.validate_tools(json.dumps({"tools": [{"name": "lonely"}]}))

        paths = [issue.path for issue in result.errors]
        assert paths == ["tools.0.description", "tools.0.parameters"]
        assert all(issue.message == "Required field is missing" for issue in result.errors)

    def test_description_length(self, validator):
        result = validator.validate_tools(tools_document(make_tool(description="Too short")))

        assert result.valid is False
        assert [issue.path for issue in result.errors] == ["tools.0.description"]

    def test_tool_name_pattern(self, validator):
        result = validator.validate_tools(tools_document(make_tool(name="GetWeather")))

        assert [issue.path for issue in result.errors] == ["tools.0.name"]

    def test_nested_parameter_errors(self, validator):
        """Test that the recursive parameter schema reaches nested definitions"""
        document = tools_document(make_tool(parameters=[{
            "name": "filter",
            "type": "object",
            "description": "Filter",
            "properties": {
                "tags": {
                    "name": "tags",
                    "type": "array",
                    "description": "Tags",
                    "items": {"name": "tag", "type": "date", "description": "Tag"},
                },
            },
        }]))

        result = validator.validate_tools(document)

        assert result.valid is False
        assert [issue.path for issue in result.errors] == [
            "tools.0.parameters.0.properties.tags.items.type"
        ]

    def test_enum_values_must_be_strings(self, validator):
        document = tools_document(make_tool(parameters=[
            {"name": "level", "type": "string", "description": "Level", "enum": ["low", 2]},
        ]))

        result = validator.validate_tools(document)

        assert [issue.path for issue in result.errors] == ["tools.0.parameters.0.enum.1"]

    def test_unknown_keys_are_allowed(self, validator):
        document = tools_document(make_tool(category="weather"))
        assert validator.validate_tools(document).valid is True

    def test_errors_sorted_with_numeric_indexes(self, validator):
        tools = [make_tool(name=f"tool{index}") for index in range(11)]
        tools[10]["description"] = "short"
        tools[2]["description"] = "short"

        result = validator.validate_tools(tools_document(*tools))

        assert [issue.path for issue in result.errors] == [
            "tools.2.description",
            "tools.10.description",
        ]

    def test_duplicate_tool_names(self, validator):
        result = validator.validate_tools(tools_document(make_tool(name="dup"), make_tool(name="dup")))

        assert result.valid is False
        assert [(issue.path, issue.message) for issue in result.errors] == [
            ("tools.dup", "Duplicate tool name: dup")
        ]

    def test_each_extra_duplicate_is_reported(self, validator):
        result = validator.validate_tools(tools_document(
            make_tool(name="search"),
            make_tool(name="search"),
            make_tool(name="search"),
        ))

        assert [issue.path for issue in result.errors] == ["tools.search", "tools.search"]

    def test_deeply_nested_parameters_do_not_raise(self, validator):
        depth = 400
        param = '{"name": "leaf", "type": "string", "description": "Leaf"}'
        for _ in range(depth):
            param = '{"name": "list", "type": "array", "description": "List", "items": %s}' % param
        document = '{"tools": [{"name": "deep", "description": "Deeply nested input", "parameters": [%s]}]}' % param

        result = validator.validate_tools(document)

        assert result.valid is False
        assert [(issue.path, issue.message) for issue in result.errors] == [
            ("", "Document nesting is too deep")
        ]

    def test_semantic_checks_skipped_on_structural_errors(self, validator):
        result = validator.validate_tools(tools_document(
            make_tool(name="dup"),
            make_tool(name="dup", description="short"),
        ))

        assert [issue.path for issue in result.errors] == ["tools.1.description"]

    def test_required_parameter_with_default_warns(self, validator):
        document = tools_document(make_tool(parameters=[
            {"name": "city", "type": "string", "description": "City", "required": True, "default": "Oslo"},
        ]))

        result = validator.validate_tools(document)

        assert result.valid is True
        assert [(issue.path, issue.message) for issue in result.warnings] == [
            ("tools.get_weather.parameters.city", "Required parameter has a default value")
        ]

    def test_ignored_nested_schema_warns(self, validator):
        document = tools_document(make_tool(parameters=[{
            "name": "label",
            "type": "string",
            "description": "Label",
            "items": {"name": "item", "type": "string", "description": "Item"},
        }]))

        result = validator.validate_tools(document)

        assert result.valid is True
        assert [(issue.path, issue.message) for issue in result.warnings] == [
            ("tools.get_weather.parameters.label.items", "'items' is ignored for string parameters")
        ]


class TestServerConfigValidation:
    """Test rules for mcp.json"""

    def test_minimal_config(self, validator):
        result = validator.validate_config(json.dumps({"name": "my-server", "version": "1.0.0"}))
        assert result.valid is True

    def test_invalid_fields(self, validator):
        result = validator.validate_config(json.dumps({
            "name": "My Server",
            "version": "1.0",
            "repository": "not a uri",
            "transport": {"type": "http", "options": {"port": 70000}},
        }))

        assert result.valid is False
        assert [issue.path for issue in result.errors] == [
            "name",
            "repository",
            "transport.options.port",
            "version",
        ]

    def test_prerelease_version_and_uri(self, validator):
        result = validator.validate_config(json.dumps({
            "name": "my-server",
            "version": "1.0.0-beta.1+build.5",
            "repository": "https://github.com/example/my-server",
        }))

        assert result.valid is True

    def test_missing_version(self, validator):
        result = validator.validate(DocumentKind.CONFIG, json.dumps({"name": "my-server"}))
        assert [(issue.path, issue.message) for issue in result.errors] == [
            ("version", "Required field is missing")
        ]


class TestValidationResult:
    """Test result bookkeeping"""

    def test_add_error_invalidates(self):
        result = ValidationResult()
        result.add_warning("a", "careful")
        assert result.valid is True

        result.add_error("b", "broken")
        assert result.valid is False
        assert result.to_dict() == {
            "valid": False,
            "errors": [{"path": "b", "message": "broken"}],
            "warnings": [{"path": "a", "message": "careful"}],
        }


class TestSourcePositions:
    """Test mapping of diagnostics back to source text"""

    def test_locate_path(self):
        content = '{\n  "tools": [\n    {\n      "name": "x"\n    }\n  ]\n}'

        assert locate_path(content, "tools.0.name") == SourcePosition(3, 6, len('"name":'))

    def test_first_occurrence_wins(self):
        content = '{\n  "name": "outer",\n  "inner": {"name": "inner"}\n}'
        assert locate_path(content, "inner.name").line == 1

    def test_fallback_to_document_start(self):
        assert locate_path('{"a": 1}', "missing") == SourcePosition(0, 0, 0)
        assert locate_path('{"a": 1}', "") == SourcePosition(0, 0, 0)

    def test_attach_positions(self, validator):
        content = '{\n  "name": "Bad Name",\n  "version": "1.0.0"\n}'
        result = attach_positions(content, validator.validate_config(content))

        assert result.errors[0].line == 1
        assert result.errors[0].column == 2


class TestFiles:
    """Test file based validation"""

    def test_kind_for_path(self):
        assert kind_for_path("project/mcp.json") == DocumentKind.CONFIG
        assert kind_for_path("project/mcp-tools.json") == DocumentKind.TOOLS
        assert kind_for_path("project/package.json") is None

    def test_validate_file(self, validator, tmp_path):
        tools_file = tmp_path / "mcp-tools.json"
        tools_file.write_text(tools_document(make_tool(description="short")))

        result = validator.validate_file(tools_file)

        assert result.valid is False
        assert result.errors[0].line is not None

    def test_unrelated_file_is_skipped(self, validator, tmp_path):
        other = tmp_path / "other.json"
        other.write_text("{not json")

        result = validator.validate_file(other)

        assert result.valid is True
        assert result.errors == []


class TestParseGates:
    """Test that invalid documents are refused downstream"""

    def test_parse_tool_collection(self):
        collection = parse_tool_collection(tools_document(make_tool()))

        assert isinstance(collection, ToolCollection)
        assert collection.tool_names == ["get_weather"]

    def test_parse_tool_collection_refuses_invalid(self):
        with pytest.raises(ToolCollectionError) as exc_info:
            parse_tool_collection(tools_document(make_tool(name="dup"), make_tool(name="dup")))

        assert isinstance(exc_info.value, SchemaValidationError)
        assert exc_info.value.result.valid is False

    def test_parse_server_config_refuses_invalid(self):
        with pytest.raises(ServerConfigError):
            parse_server_config(json.dumps({"name": "x"}))
