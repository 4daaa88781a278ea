"""
Test suite for test case derivation
"""

import pytest

from mcp_builder.testing import ExpectedOutput, TestCase, TestGenerator
from mcp_builder.tool_definition_schema import (
    ParameterDefinition,
    ParameterType,
    ToolCollection,
)


@pytest.fixture
def collection():
    return ToolCollection.from_dict({"tools": [
        {
            "name": "hello",
            "description": "Greets the user by name",
            "parameters": [
                {"name": "name", "type": "string", "description": "Name", "required": True},
                {"name": "excited", "type": "boolean", "description": "Add an exclamation mark"},
            ],
            "examples": [
                {"description": "Greet the world", "input": {"name": "World"}, "output": "Hello, World!"},
                {"input": {"name": "Ada", "excited": True}},
            ],
        },
        {
            "name": "ping",
            "description": "Checks the server is alive",
            "parameters": [],
        },
    ]})


@pytest.fixture
def generator():
    return TestGenerator()


class TestGenerateFromTools:
    """Test derived cases"""

    def test_case_ids_and_order(self, generator, collection):
        cases = generator.generate_from_tools(collection)

        assert [case.id for case in cases] == [
            "hello-basic",
            "hello-required-params",
            "hello-example-0",
            "hello-example-1",
            "ping-basic",
        ]

    def test_case_names(self, generator, collection):
        cases = generator.generate_from_tools(collection)

        assert [case.name for case in cases] == [
            "hello: Basic invocation",
            "hello: Required parameters",
            "hello: Example 1 - Greet the world",
            "hello: Example 2",
            "ping: Basic invocation",
        ]

    def test_basic_case_fills_every_parameter(self, generator, collection):
        basic = generator.generate_from_tools(collection)[0]

        assert basic.tool == "hello"
        assert basic.input == {"name": "sample_name", "excited": True}
        assert basic.expected_output == ExpectedOutput(type="text")

    def test_required_case_only_has_required_parameters(self, generator, collection):
        required = generator.generate_from_tools(collection)[1]

        assert required.input == {"name": "sample_name"}
        assert required.expected_output == ExpectedOutput(type="text")

    def test_example_cases_use_example_input(self, generator, collection):
        cases = generator.generate_from_tools(collection)

        assert cases[2].input == {"name": "World"}
        assert cases[2].expected_output is None
        assert cases[3].input == {"name": "Ada", "excited": True}

    def test_example_input_is_copied(self, generator, collection):
        case = generator.generate_from_tools(collection)[2]
        case.input["name"] = "changed"

        assert collection.get_tool("hello").examples[0].input == {"name": "World"}

    def test_accepts_plain_sequence(self, generator, collection):
        cases = generator.generate_from_tools(list(collection.tools))
        assert len(cases) == 5

    def test_empty_collection(self, generator):
        assert generator.generate_from_tools(ToolCollection()) == []

    def test_default_timeout(self, collection):
        cases = TestGenerator(default_timeout=2.5).generate_from_tools(collection)

        assert all(isinstance(case, TestCase) for case in cases)
        assert {case.timeout for case in cases} == {2.5}

    def test_no_timeout_by_default(self, generator, collection):
        assert all(case.timeout is None for case in generator.generate_from_tools(collection))


class TestSampleValues:
    """Test sample value selection"""

    @pytest.mark.parametrize("param_type, expected", [
        (ParameterType.STRING, "sample_value"),
        (ParameterType.NUMBER, 42),
        (ParameterType.BOOLEAN, True),
        (ParameterType.ARRAY, []),
        (ParameterType.OBJECT, {}),
    ])
    def test_per_type_samples(self, param_type, expected):
        param = ParameterDefinition(name="value", type=param_type, description="Value")
        assert TestGenerator.generate_sample_value(param) == expected

    def test_default_wins_over_enum(self):
        param = ParameterDefinition(name="mode", type=ParameterType.STRING, description="Mode",
                                    default="fast", enum=("slow", "fast"))
        assert TestGenerator.generate_sample_value(param) == "fast"

    def test_none_default_is_used(self):
        param = ParameterDefinition(name="cursor", type=ParameterType.STRING, description="Cursor",
                                    default=None)
        assert TestGenerator.generate_sample_value(param) is None

    def test_first_enum_value(self):
        param = ParameterDefinition(name="period", type=ParameterType.STRING, description="Period",
                                    enum=("day", "week"))
        assert TestGenerator.generate_sample_value(param) == "day"

    def test_fresh_containers(self):
        param = ParameterDefinition(name="items", type=ParameterType.ARRAY, description="Items")

        first = TestGenerator.generate_sample_value(param)
        first.append(1)

        assert TestGenerator.generate_sample_value(param) == []

    def test_default_is_copied(self):
        param = ParameterDefinition(name="tags", type=ParameterType.ARRAY, description="Tags",
                                    default=["a"])

        value = TestGenerator.generate_sample_value(param)
        value.append("b")

        assert param.default == ["a"]
