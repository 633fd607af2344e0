"""Testing analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SOURCE_EXTENSIONS, labels, name_glob
from ..manifests import (
    NodeManifest,
    PythonManifest,
    java_frameworks,
    load_java_dependencies,
    load_node_manifest,
    load_python_manifest,
)
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace


@dataclass(frozen=True)
class TestingFindings:
    __test__ = False

    test_files: int = 0
    uses_jest: bool = False
    uses_vitest: bool = False
    uses_mocha: bool = False
    uses_pytest: bool = False
    uses_junit: bool = False
    uses_react_testing_library: bool = False
    uses_cypress: bool = False
    uses_playwright: bool = False

    @property
    def frameworks(self) -> List[str]:
        return labels(
            [
                (self.uses_jest, "Jest"),
                (self.uses_vitest, "Vitest"),
                (self.uses_mocha, "Mocha"),
                (self.uses_pytest, "pytest"),
                (self.uses_junit, "JUnit"),
                (self.uses_react_testing_library, "React Testing Library"),
                (self.uses_cypress, "Cypress"),
                (self.uses_playwright, "Playwright"),
            ]
        )


def build_guidelines(stack: TechStack, findings: TestingFindings) -> List[str]:
    guidelines: List[str] = [
        "Write tests that are independent and can run in any order",
        "Use descriptive test names that explain what is being tested",
        "Follow AAA pattern: Arrange, Act, Assert",
        "Test behavior, not implementation",
        "Keep tests simple and focused on one thing",
        "Use mocks and stubs for external dependencies",
        "Test edge cases and error conditions",
        "Maintain good test coverage but focus on critical paths",
        "Keep tests fast and reliable",
        "Refactor tests when code changes",
    ]

    if stack.has_node:
        if findings.uses_jest:
            guidelines.extend(
                [
                    "Use Jest for unit and integration tests",
                    "Use describe blocks to group related tests",
                    "Use beforeEach/afterEach for test setup and cleanup",
                    "Mock external dependencies with jest.mock()",
                    "Use snapshot tests sparingly for UI components",
                    "Use test.each for parameterized tests",
                    "Configure Jest coverage thresholds",
                    "Use async/await in tests for async code",
                ]
            )
        if findings.uses_vitest:
            guidelines.extend(
                [
                    "Use Vitest for fast unit tests",
                    "Leverage Vitest's ESM support",
                    "Use Vitest UI for better test debugging",
                    "Configure Vitest for your project structure",
                ]
            )
        if findings.uses_mocha:
            guidelines.extend(
                [
                    "Use Mocha with Chai for assertions",
                    "Use beforeEach/afterEach hooks for setup",
                    "Organize tests with describe blocks",
                ]
            )
        if findings.uses_react_testing_library and stack.has_react:
            guidelines.extend(
                [
                    "Use React Testing Library for component tests",
                    "Test user interactions, not implementation details",
                    "Use accessible queries (getByRole, getByLabelText)",
                    "Avoid using data-testid unless necessary",
                    "Use screen queries for better error messages",
                    "Test accessibility as part of component tests",
                    "Use userEvent for simulating user interactions",
                    "Mock external API calls in tests",
                ]
            )
        if findings.uses_cypress:
            guidelines.extend(
                [
                    "Use Cypress for end-to-end testing",
                    "Write tests from user perspective",
                    "Use data-cy attributes for stable selectors",
                    "Avoid testing implementation details",
                    "Use custom commands for reusable actions",
                    "Test critical user flows",
                    "Use fixtures for test data",
                ]
            )
        if findings.uses_playwright:
            guidelines.extend(
                [
                    "Use Playwright for cross-browser testing",
                    "Write tests that work across browsers",
                    "Use page object model for maintainability",
                    "Test accessibility with Playwright",
                    "Use Playwright's auto-waiting features",
                    "Test on multiple viewport sizes",
                ]
            )

    if stack.has_python:
        if findings.uses_pytest:
            guidelines.extend(
                [
                    "Use pytest for Python testing",
                    "Use fixtures for test setup and dependencies",
                    "Use parametrize for testing multiple inputs",
                    "Use pytest markers for test organization",
                    "Use pytest fixtures for dependency injection",
                    "Follow pytest naming conventions",
                    "Use pytest plugins for additional functionality",
                ]
            )
        guidelines.extend(
            [
                "Use unittest.mock for mocking",
                "Test both success and failure cases",
                "Use pytest-cov for coverage reporting",
            ]
        )

    if stack.has_java and findings.uses_junit:
        guidelines.extend(
            [
                "Use JUnit for unit testing",
                "Use @BeforeEach and @AfterEach for setup",
                "Use assertions from AssertJ or Hamcrest",
                "Use @ParameterizedTest for multiple test cases",
                "Follow JUnit 5 best practices",
            ]
        )

    guidelines.extend(
        [
            "Organize tests to mirror source code structure",
            "Keep test files close to source files",
            "Use test utilities and helpers for common patterns",
            "Document complex test scenarios",
            "Review and refactor tests regularly",
        ]
    )

    return guidelines


class TestingAnalyzer(Analyzer):
    """Emits testing guidance tailored to the detected test frameworks."""

    __test__ = False

    name = "testing"
    display_name = "Testing Analyzer"
    category = SkillCategory.TESTING

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        context.logger.info("Testing analyzer: Found %d test files", findings.test_files)
        return [
            Skill(
                name="testing-best-practices",
                display_name="Testing Best Practices",
                description="Guidelines for writing effective tests based on detected testing frameworks",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "test_files_count": findings.test_files,
                    "frameworks": findings.frameworks,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> TestingFindings:
        test_files = await workspace.glob(name_glob(["test", "spec"], SOURCE_EXTENSIONS))
        node = await load_node_manifest(workspace) or NodeManifest()
        python = await load_python_manifest(workspace) or PythonManifest()
        java = java_frameworks(await load_java_dependencies(workspace))
        return TestingFindings(
            test_files=len(test_files),
            uses_jest=node.has("jest"),
            uses_vitest=node.has("vitest"),
            uses_mocha=node.has("mocha"),
            uses_pytest=python.has("pytest"),
            uses_junit=java["JUnit"],
            uses_react_testing_library=node.has("@testing-library/react"),
            uses_cypress=node.has("cypress"),
            uses_playwright=node.has("@playwright/test"),
        )
