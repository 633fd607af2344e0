"""Frontend analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import extension_glob, first_label
from ..manifests import NodeManifest, load_node_manifest
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_STYLE_EXTENSIONS = ("css", "scss", "sass", "less")


@dataclass(frozen=True)
class FrontendFindings:
    frontend_files: int = 0
    css_files: int = 0
    uses_tailwind: bool = False
    uses_styled_components: bool = False
    uses_css_modules: bool = False
    uses_material_ui: bool = False
    uses_chakra_ui: bool = False
    uses_ant_design: bool = False

    @property
    def css_framework(self) -> str:
        return first_label(
            [
                (self.uses_tailwind, "Tailwind"),
                (self.uses_styled_components, "Styled Components"),
                (self.uses_css_modules, "CSS Modules"),
            ],
            "Standard CSS",
        )

    @property
    def component_library(self) -> str:
        return first_label(
            [
                (self.uses_material_ui, "Material-UI"),
                (self.uses_chakra_ui, "Chakra UI"),
                (self.uses_ant_design, "Ant Design"),
            ],
            "None",
        )


def build_guidelines(stack: TechStack, findings: FrontendFindings) -> List[str]:
    guidelines: List[str] = [
        "Write semantic HTML",
        "Ensure accessibility (a11y): proper ARIA labels, keyboard navigation",
        "Optimize images: use appropriate formats (WebP, AVIF), lazy loading",
        "Implement responsive design (mobile-first approach)",
        "Use CSS variables for theming",
        "Minimize layout shifts (CLS)",
        "Optimize font loading",
        "Implement proper error boundaries",
    ]

    if stack.has_typescript:
        guidelines.extend(
            [
                "Use TypeScript for type safety",
                "Define proper interfaces for props and data structures",
                "Avoid using any type",
                "Use strict mode for better type checking",
            ]
        )

    if findings.uses_tailwind:
        guidelines.extend(
            [
                "Use Tailwind utility classes for styling",
                "Extract repeated patterns into components",
                "Use Tailwind plugins for custom utilities",
                "Configure Tailwind theme for design system consistency",
                "Use @apply sparingly, prefer utility classes",
            ]
        )

    if findings.uses_styled_components:
        guidelines.extend(
            [
                "Use styled-components for component-scoped styling",
                "Extract styled components into separate files for reusability",
                "Use theme provider for consistent theming",
                "Avoid inline styles, use styled components",
                "Use CSS-in-JS best practices for performance",
            ]
        )

    if findings.uses_css_modules:
        guidelines.extend(
            [
                "Use CSS Modules for scoped styling",
                "Follow BEM naming convention when appropriate",
                "Keep CSS modules co-located with components",
            ]
        )

    if findings.uses_material_ui:
        guidelines.extend(
            [
                "Use Material-UI components consistently",
                "Customize theme using MUI theme provider",
                "Follow Material Design principles",
                "Use MUI Grid system for layouts",
            ]
        )

    if findings.uses_chakra_ui:
        guidelines.extend(
            [
                "Use Chakra UI components and hooks",
                "Customize theme through ChakraProvider",
                "Use Chakra responsive props for mobile-first design",
            ]
        )

    if findings.uses_ant_design:
        guidelines.extend(
            [
                "Use Ant Design components consistently",
                "Customize theme through ConfigProvider",
                "Follow Ant Design design principles",
            ]
        )

    guidelines.extend(
        [
            "Implement code splitting for routes",
            "Lazy load components and routes",
            "Optimize bundle size with tree shaking",
            "Use dynamic imports for heavy libraries",
            "Implement virtual scrolling for long lists",
            "Debounce/throttle user input handlers",
            "Use Web Workers for heavy computations",
        ]
    )

    guidelines.extend(
        [
            "Write unit tests for components",
            "Test user interactions, not implementation",
            "Use accessibility testing tools",
            "Test responsive design at different breakpoints",
        ]
    )

    return guidelines


class FrontendAnalyzer(Analyzer):
    """Generates client-side guidance when frontend sources are present."""

    name = "frontend"
    display_name = "Frontend Analyzer"
    category = SkillCategory.FRONTEND

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        if not findings.frontend_files:
            context.logger.info("Frontend analyzer: No frontend files detected")
            return []

        context.logger.info(
            "Frontend analyzer: Found %d frontend files, CSS: %d",
            findings.frontend_files,
            findings.css_files,
        )
        return [
            Skill(
                name="frontend-best-practices",
                display_name="Frontend Best Practices",
                description="Guidelines for writing high-quality frontend code",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "css_framework": findings.css_framework,
                    "component_library": findings.component_library,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> FrontendFindings:
        frontend_files = await workspace.glob(
            extension_glob(("js", "jsx", "ts", "tsx") + _STYLE_EXTENSIONS),
            ignore=["server/", "backend/"],
        )
        if not frontend_files:
            return FrontendFindings()

        css_files = await workspace.glob(extension_glob(_STYLE_EXTENSIONS))
        manifest = await load_node_manifest(workspace) or NodeManifest()
        return FrontendFindings(
            frontend_files=len(frontend_files),
            css_files=len(css_files),
            uses_tailwind=manifest.has("tailwindcss"),
            uses_styled_components=manifest.has("styled-components"),
            uses_css_modules=manifest.has("css-modules")
            or any(path.endswith((".module.css", ".module.scss")) for path in css_files),
            uses_material_ui=manifest.has("@mui/material", "@material-ui/core"),
            uses_chakra_ui=manifest.has("@chakra-ui/react"),
            uses_ant_design=manifest.has("antd"),
        )
