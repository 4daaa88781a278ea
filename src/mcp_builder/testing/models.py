"""
Test case and result types shared by the deriver, matcher and runner
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Union

from ..tool_result import ToolResult


@dataclass
class ExpectedOutput:
    """Expectations checked against a tool result; every field is optional"""
    type: Optional[str] = None  # content type that must be present
    contains: Optional[str] = None
    matches: Optional[Union[str, Pattern[str]]] = None
    validator: Optional[Callable[[ToolResult], bool]] = None


@dataclass
class TestCase:
    """A single tool invocation with optional expectations"""
    __test__ = False

    id: str
    name: str
    tool: str
    input: Dict[str, Any] = field(default_factory=dict)
    expected_output: Optional[ExpectedOutput] = None
    timeout: Optional[float] = None  # seconds


@dataclass
class TestResult:
    """Outcome of running one test case"""
    __test__ = False

    test_id: str
    passed: bool
    duration: float  # seconds
    output: Optional[ToolResult] = None
    error: Optional[str] = None

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration * 1000))


@dataclass
class TestSuiteResult:
    """Aggregate outcome of a test run"""
    __test__ = False

    passed: int
    failed: int
    skipped: int
    duration: float  # seconds
    results: List[TestResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.cancelled
