"""
Output Matcher - checks a tool result against an expected output
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..tool_result import ToolResult
from .models import ExpectedOutput


@dataclass
class MatchResult:
    passed: bool
    error: Optional[str] = None


class OutputMatcher:
    """
    Evaluates expectations in a fixed order: content type, substring,
    pattern, custom validator. The first violation is reported and the
    remaining checks are skipped.
    """

    def match(self, result: ToolResult, expected: Optional[ExpectedOutput]) -> MatchResult:
        if expected is None:
            return MatchResult(passed=True)

        if expected.type is not None and expected.type not in result.content_types():
            return MatchResult(False, f'Expected content type "{expected.type}" not found')

        text = result.text_content()

        if expected.contains is not None and expected.contains not in text:
            return MatchResult(False, f'Output does not contain "{expected.contains}"')

        if expected.matches is not None:
            pattern = re.compile(expected.matches)
            if not pattern.search(text):
                return MatchResult(False, f"Output does not match pattern /{pattern.pattern}/")

        if expected.validator is not None and not expected.validator(result):
            return MatchResult(False, "Custom validator returned false")

        return MatchResult(passed=True)
