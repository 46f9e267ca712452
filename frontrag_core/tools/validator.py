"""
FrontRAG Tools - Code style validation

Combines three sources of findings:

    1. the engine's retrieval-driven check (indexed style rules)
    2. built-in default rules (component naming, console statements,
       TODO comments, ``any`` annotations)
    3. the current project's custom regex rules and override preferences

Violations make the code invalid; suggestions do not.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from ..project.config import ProjectConfig
from ..rag.engine import exported_component_name
from .base import Envelope, ToolContext, activate_project, text_response, tool_handler

logger = logging.getLogger(__name__)


@dataclass
class ValidationRule:
    name: str
    pattern: Pattern
    message: str
    file_types: Tuple[str, ...]


DEFAULT_RULES: List[ValidationRule] = [
    ValidationRule(
        name="component-name",
        pattern=re.compile(r"^[A-Z]"),
        message="Component names should start with uppercase letter",
        file_types=("tsx", "jsx"),
    ),
    ValidationRule(
        name="no-console",
        pattern=re.compile(r"console\.(log|error|warn|info)"),
        message="Remove console statements from production code",
        file_types=("ts", "tsx", "js", "jsx"),
    ),
    ValidationRule(
        name="todo",
        pattern=re.compile(r"//\s*TODO"),
        message="TODO comments should be resolved before committing",
        file_types=("ts", "tsx", "js", "jsx", "css", "scss"),
    ),
    ValidationRule(
        name="no-any",
        pattern=re.compile(r":\s*any\b"),
        message='Avoid using "any" type in TypeScript',
        file_types=("ts", "tsx"),
    ),
]

PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z]*$")


@dataclass
class ValidationReport:
    violations: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def apply_default_rules(code: str, file_type: str, report: ValidationReport) -> None:
    for rule in DEFAULT_RULES:
        if file_type not in rule.file_types:
            continue

        if rule.name == "component-name":
            name = exported_component_name(code)
            if name is not None and not rule.pattern.search(name):
                report.violations.append(rule.message)
        elif rule.name == "no-console":
            if rule.pattern.search(code):
                report.violations.append(rule.message)
        elif rule.name == "todo":
            if rule.pattern.search(code):
                report.suggestions.append(rule.message)
        elif rule.name == "no-any":
            found = len(rule.pattern.findall(code))
            if found:
                report.violations.append(f"{rule.message} (found {found} occurrences)")


def apply_project_rules(
    code: str,
    file_type: str,
    project: Optional[ProjectConfig],
    report: ValidationReport,
) -> None:
    """Custom regex rules plus suggestions driven by project overrides."""
    if project is None:
        return

    if project.rules:
        for rule in project.rules.custom_rules:
            if re.search(rule.pattern, code):
                report.violations.append(rule.message)

    overrides = project.overrides
    if overrides is None or file_type != "tsx":
        return

    if overrides.styling == "css-modules" and "styles." not in code and "className" not in code:
        report.suggestions.append(
            'Consider using CSS modules for styling (import styles from "./Component.module.css")'
        )
    if overrides.styling == "styled-components" and "styled" not in code:
        report.suggestions.append("Consider using styled-components for styling")
    if overrides.naming_convention == "PascalCase":
        name = exported_component_name(code)
        if name is not None and not PASCAL_CASE.match(name):
            report.violations.append("Component name should follow PascalCase convention")


def format_report(report: ValidationReport) -> str:
    lines = ["## Code Style Validation Result", ""]
    lines.append(f"**Status:** {'✅ Valid' if report.is_valid else '❌ Invalid'}")
    lines.append("")

    if report.violations:
        lines.append("### Violations Found:")
        lines.extend(f"{i}. {v}" for i, v in enumerate(report.violations, 1))
        lines.append("")

    if report.suggestions:
        lines.append("### Suggestions:")
        lines.extend(f"{i}. {s}" for i, s in enumerate(report.suggestions, 1))
        lines.append("")

    if report.is_valid and not report.suggestions:
        lines.append("Your code follows all the style guidelines! 🎉")

    return "\n".join(lines)


@tool_handler("Error validating code style")
async def validate_code_style(
    ctx: ToolContext,
    code: str,
    file_type: str,
    project_path: Optional[str] = None,
) -> Envelope:
    await activate_project(ctx, project_path)

    engine_result = await ctx.engine.validate_style(code, file_type)
    report = ValidationReport(
        violations=list(engine_result.violations),
        suggestions=list(engine_result.suggestions),
    )

    apply_default_rules(code, file_type, report)
    apply_project_rules(code, file_type, ctx.engine.get_current_project(), report)

    logger.debug(
        f"validate_code_style: {len(report.violations)} violations, "
        f"{len(report.suggestions)} suggestions"
    )
    return text_response(format_report(report))
