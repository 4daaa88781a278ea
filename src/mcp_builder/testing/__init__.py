"""
Test derivation and execution for MCP tool collections
"""

from .generator import TestGenerator
from .matcher import MatchResult, OutputMatcher
from .models import ExpectedOutput, TestCase, TestResult, TestSuiteResult
from .runner import (
    CancellationToken,
    SimulatedInvoker,
    TestRunner,
    format_result_line,
    format_suite_report,
    load_invoker,
    simulated_invoke,
)

__all__ = [
    "TestGenerator",
    "MatchResult",
    "OutputMatcher",
    "ExpectedOutput",
    "TestCase",
    "TestResult",
    "TestSuiteResult",
    "CancellationToken",
    "SimulatedInvoker",
    "TestRunner",
    "format_result_line",
    "format_suite_report",
    "load_invoker",
    "simulated_invoke",
]
