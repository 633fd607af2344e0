"""Pipeline orchestration: stack detection, concurrent analyzers, persistence."""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .analyzers import Analyzer, discover_analyzers
from .config import ConfigError, SkillgenConfig, load_config
from .errors import StackBuildError
from .logging import get_logger
from .models import (
    AnalysisReport,
    AnalyzerOutcome,
    AnalyzerSummary,
    Context,
    PersistResult,
    RunResult,
    Skill,
    TechStack,
)
from .sink import SkillWriter
from .stack import TechStackDetector


class RunState(str, Enum):
    IDLE = "idle"
    STACK_BUILT = "stack_built"
    ANALYZERS_RUNNING = "analyzers_running"
    AGGREGATED = "aggregated"
    PERSISTED = "persisted"
    DONE = "done"
    FAILED = "failed"


class Orchestrator:
    """Coordinates one skill generation run over a workspace.

    The tech stack is built once and shared read-only by every analyzer. Analyzers
    run concurrently and each one is isolated: an exception or timeout becomes a
    failed outcome for that analyzer alone. Only a stack build failure aborts the
    run.
    """

    def __init__(
        self,
        detector: TechStackDetector | None = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
        writer: SkillWriter | None = None,
        *,
        enabled: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.detector = detector or TechStackDetector()
        self._analyzer_overrides = list(analyzers) if analyzers is not None else None
        self.writer = writer or SkillWriter()
        self._enabled_override = list(enabled) if enabled is not None else None
        self._timeout_override = timeout
        self.logger = get_logger("orchestrator")
        self.state = RunState.IDLE
        self._trace: List[RunState] = []

    def run_sync(
        self,
        path: str | Path,
        *,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ) -> RunResult:
        """Blocking wrapper around :meth:`run` for synchronous callers."""
        return asyncio.run(self.run(path, output_dir=output_dir, dry_run=dry_run))

    async def run(
        self,
        path: str | Path,
        *,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ) -> RunResult:
        """Detect the stack, run every analyzer and persist the resulting skills.

        Raises ``StackBuildError`` when the workspace cannot be inspected. Every
        other failure is captured in the returned report.
        """
        self._trace = []
        self._transition(RunState.IDLE)

        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Starting skill generation for %s", repo_path)

        config = self._load_config(repo_path)
        context = Context(
            logger=get_logger("analyzers"),
            exclude_paths=tuple(config.exclude_paths),
            content_scan_limit=config.probes.content_scan_limit,
        )
        analyzers = self._select_analyzers(config)
        timeout = self._timeout_override if self._timeout_override is not None else config.analyzers.timeout

        try:
            stack = await self.detector.detect(repo_path, context)
        except StackBuildError as exc:
            self._transition(RunState.FAILED)
            self.logger.error("Fatal error: %s", exc)
            raise
        self._transition(RunState.STACK_BUILT)
        self.logger.info("Detected languages: %s", ", ".join(stack.languages) or "None detected")

        self._transition(RunState.ANALYZERS_RUNNING)
        self.logger.info("Launching %d analyzers", len(analyzers))
        outcomes = await asyncio.gather(
            *(self._run_analyzer(analyzer, repo_path, stack, context, timeout) for analyzer in analyzers)
        )

        report, skills = self._aggregate(stack, outcomes)
        self._transition(RunState.AGGREGATED)

        persisted: List[PersistResult] = []
        if dry_run:
            self.logger.info("Dry run: skipping persistence of %d skill(s)", len(skills))
        else:
            destination = output_dir or config.resolved_output_dir()
            self.logger.info("Saving %d generated skill(s) to %s", len(skills), destination)
            persisted = await asyncio.to_thread(self.writer.persist_all, skills, destination)
            self._transition(RunState.PERSISTED)

        self._log_summary(report)
        self._transition(RunState.DONE)
        return RunResult(
            report=report,
            skills=tuple(skills),
            persisted=tuple(persisted),
            states=tuple(state.value for state in self._trace),
        )

    async def detect(self, path: str | Path) -> TechStack:
        """Build and return the tech stack without running analyzers."""
        repo_path = Path(path).expanduser().resolve()
        config = self._load_config(repo_path)
        context = Context(
            logger=get_logger("probes"),
            exclude_paths=tuple(config.exclude_paths),
            content_scan_limit=config.probes.content_scan_limit,
        )
        return await self.detector.detect(repo_path, context)

    async def _run_analyzer(
        self,
        analyzer: Analyzer,
        root: Path,
        stack: TechStack,
        context: Context,
        timeout: Optional[float],
    ) -> AnalyzerOutcome:
        label = analyzer.display_name or analyzer.name
        self.logger.info("Starting %s...", label)
        started = time.perf_counter()
        try:
            if timeout is not None:
                skills = await asyncio.wait_for(analyzer.analyze(root, stack, context), timeout)
            else:
                skills = await analyzer.analyze(root, stack, context)
        except Exception as exc:
            duration = time.perf_counter() - started
            if timeout is not None and _cancelled_by_timeout(exc):
                error = f"TimeoutError: timed out after {timeout:g}s"
            else:
                error = f"{type(exc).__name__}: {exc}"
            self.logger.error("%s failed: %s", label, error)
            self.logger.debug("%s traceback", label, exc_info=True)
            return AnalyzerOutcome.failed(analyzer.name, error, duration)

        duration = time.perf_counter() - started
        skills = tuple(skills or ())
        self.logger.info("%s completed: Generated %d skill(s)", label, len(skills))
        return AnalyzerOutcome.succeeded(analyzer.name, skills, duration)

    @staticmethod
    def _aggregate(
        stack: TechStack, outcomes: Sequence[AnalyzerOutcome]
    ) -> tuple[AnalysisReport, List[Skill]]:
        skills: List[Skill] = []
        summaries: List[AnalyzerSummary] = []
        for outcome in outcomes:
            skills.extend(outcome.skills)
            summaries.append(
                AnalyzerSummary(
                    name=outcome.analyzer_name,
                    skills_generated=len(outcome.skills),
                    status=outcome.status,
                    error=outcome.error,
                )
            )
        report = AnalysisReport(
            tech_stack=stack,
            total_skills_generated=len(skills),
            analyzers=tuple(summaries),
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        )
        return report, skills

    def _log_summary(self, report: AnalysisReport) -> None:
        stack = report.tech_stack
        self.logger.info("Skill Generation Summary:")
        self.logger.info("  Total Skills Generated: %d", report.total_skills_generated)
        self.logger.info("  Tech Stack: %s", ", ".join(stack.languages))
        self.logger.info("  Frameworks: %s", ", ".join(sorted(stack.frameworks)) or "None detected")
        self.logger.info("  Databases: %s", ", ".join(sorted(stack.databases)) or "None detected")
        failed = report.failed_analyzers
        if failed:
            self.logger.info("  Failed analyzers: %s", ", ".join(entry.name for entry in failed))

    def _load_config(self, repo_path: Path) -> SkillgenConfig:
        try:
            return load_config(repo_path)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
        except OSError as exc:
            # An unreadable root surfaces as StackBuildError from the detector.
            self.logger.warning("Could not inspect configuration in %s: %s", repo_path, exc)
        return SkillgenConfig(root=repo_path)

    def _select_analyzers(self, config: SkillgenConfig) -> List[Analyzer]:
        if self._analyzer_overrides is not None:
            return list(self._analyzer_overrides)
        enabled = self._enabled_override or config.analyzers.enabled or None
        return list(discover_analyzers(enabled))

    def _transition(self, state: RunState) -> None:
        self.state = state
        self._trace.append(state)



def _cancelled_by_timeout(exc: BaseException) -> bool:
    # wait_for chains its TimeoutError to the CancelledError of the awaited task;
    # a TimeoutError raised by the analyzer itself carries no such cause.
    return isinstance(exc, asyncio.TimeoutError) and isinstance(
        exc.__cause__, asyncio.CancelledError
    )


__all__ = ["Orchestrator", "RunState"]
