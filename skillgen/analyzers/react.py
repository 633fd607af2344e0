"""React analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SCRIPT_EXTENSIONS, extension_glob, first_label, languages_among, name_glob, scan_flags
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_COMPONENT_SCAN_LIMIT = 30
_STATE_SCAN_LIMIT = 10

_COMPONENT_MARKERS = (
    ("state", ("useState",)),
    ("effect", ("useEffect",)),
    ("context", ("useContext", "createContext")),
    ("hooks", ("useState", "useEffect", "useContext", "useRef", "useMemo", "useCallback", "useReducer")),
    ("custom_hooks", ("function use", "const use")),
)

_STATE_MARKERS = (
    ("redux", ("redux", "createSlice")),
    ("zustand", ("zustand",)),
    ("mobx", ("mobx", "makeObservable", "makeAutoObservable")),
)


@dataclass(frozen=True)
class ReactFindings:
    component_files: int = 0
    state_files: int = 0
    uses_hooks: bool = False
    uses_state: bool = False
    uses_effect: bool = False
    uses_context: bool = False
    uses_custom_hooks: bool = False
    uses_redux: bool = False
    uses_zustand: bool = False
    uses_mobx: bool = False


def build_guidelines(stack: TechStack, findings: ReactFindings) -> List[str]:
    guidelines: List[str] = [
        "Use functional components with hooks instead of class components",
        "Keep components small and focused on a single responsibility",
        "Extract reusable logic into custom hooks",
        "Use proper key props for list items",
        "Avoid creating functions and objects inside render methods",
        "Use TypeScript for type safety in React components",
    ]

    if findings.uses_state:
        guidelines.extend(
            [
                "Lift state up when multiple components need the same data",
                "Use useState for local component state",
                "Consider useReducer for complex state logic",
                "Avoid prop drilling - use Context or state management library",
            ]
        )

    if findings.uses_effect:
        guidelines.extend(
            [
                "Always include dependencies in useEffect dependency array",
                "Clean up subscriptions and timers in useEffect cleanup function",
                "Use multiple useEffect hooks to separate concerns",
                "Avoid side effects in render - use useEffect",
                "Be careful with infinite loops in useEffect",
            ]
        )

    if findings.uses_context:
        guidelines.extend(
            [
                "Split contexts by concern to avoid unnecessary re-renders",
                "Use Context for theme, auth, or app-wide state",
                "Consider performance implications of Context value changes",
            ]
        )

    if findings.uses_custom_hooks:
        guidelines.extend(
            [
                "Extract component logic into custom hooks for reusability",
                'Custom hooks should start with "use" prefix',
                "Return values and functions from custom hooks consistently",
            ]
        )

    if findings.uses_redux:
        guidelines.extend(
            [
                "Use Redux Toolkit for modern Redux patterns",
                "Keep reducers pure and side-effect free",
                "Use createSlice for simpler reducer logic",
                "Use RTK Query for data fetching when appropriate",
                "Select only needed data from Redux store",
            ]
        )

    if findings.uses_zustand:
        guidelines.extend(
            [
                "Use Zustand for simpler state management needs",
                "Keep stores focused and split by domain",
                "Use selectors to prevent unnecessary re-renders",
            ]
        )

    if findings.uses_mobx:
        guidelines.extend(
            [
                "Keep MobX stores as plain classes with makeAutoObservable",
                "Wrap components that read observables with observer()",
                "Modify observable state only inside actions",
            ]
        )

    if "Next.js" in stack.frameworks:
        guidelines.extend(
            [
                "Use Next.js App Router for new projects",
                "Use Server Components by default, Client Components when needed",
                "Use next/image for optimized images",
                "Implement proper SEO with metadata API",
                "Use next/link for client-side navigation",
                "Leverage ISR (Incremental Static Regeneration) for dynamic content",
                "Use API routes for backend functionality",
                "Implement proper error boundaries and error pages",
            ]
        )

    guidelines.extend(
        [
            "Use React.memo() for components that render frequently with same props",
            "Use useMemo() for expensive computations",
            "Use useCallback() for functions passed as props",
            "Implement code splitting with React.lazy()",
            "Virtualize long lists",
            "Optimize re-renders with React DevTools Profiler",
        ]
    )

    guidelines.extend(
        [
            "Write tests for components using React Testing Library",
            "Test user interactions, not implementation details",
            "Use data-testid sparingly, prefer accessible queries",
        ]
    )

    return guidelines


class ReactAnalyzer(Analyzer):
    """Generates React guidance; inert unless React was detected."""

    name = "react"
    display_name = "React Analyzer"
    category = SkillCategory.REACT

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        if not stack.has_react:
            context.logger.info("React analyzer: No React detected, skipping React skills")
            return []

        findings = await self.collect(context.workspace(root))
        context.logger.info(
            "React analyzer: Found %d React files, hooks: %s, state: %s",
            findings.component_files,
            findings.uses_hooks,
            findings.state_files > 0,
        )

        state_management = first_label(
            [
                (findings.uses_redux, "Redux"),
                (findings.uses_zustand, "Zustand"),
                (findings.uses_mobx, "MobX"),
            ],
            "Context/State",
        )
        return [
            Skill(
                name="react-best-practices",
                display_name="React Best Practices",
                description="Guidelines for writing high-quality React code based on codebase patterns",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=languages_among(stack, ("JavaScript", "TypeScript")),
                metadata={
                    "uses_hooks": findings.uses_hooks,
                    "uses_context": findings.uses_context,
                    "uses_state": findings.uses_state,
                    "uses_effect": findings.uses_effect,
                    "uses_custom_hooks": findings.uses_custom_hooks,
                    "state_management": state_management,
                    "framework": "Next.js" if "Next.js" in stack.frameworks else "React",
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> ReactFindings:
        components = await workspace.glob(extension_glob(["jsx", "tsx"]))
        component_flags = await scan_flags(
            workspace, components, _COMPONENT_MARKERS, limit=_COMPONENT_SCAN_LIMIT
        )

        state_files = await workspace.glob(
            name_glob(["store", "redux", "zustand", "mobx", "recoil"], SCRIPT_EXTENSIONS)
        )
        state_flags = await scan_flags(
            workspace, state_files, _STATE_MARKERS, limit=_STATE_SCAN_LIMIT
        )

        return ReactFindings(
            component_files=len(components),
            state_files=len(state_files),
            uses_hooks=component_flags["hooks"],
            uses_state=component_flags["state"],
            uses_effect=component_flags["effect"],
            uses_context=component_flags["context"],
            uses_custom_hooks=component_flags["custom_hooks"],
            uses_redux=state_flags["redux"],
            uses_zustand=state_flags["zustand"],
            uses_mobx=state_flags["mobx"],
        )
