"""
Markdown import report.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.errors import Diagnostic
from ..core.ir import AppModel, EntitySource, GeneratedFile

REPORT_FILE_NAME = "IMPORT_REPORT.md"

_SOURCE_LABELS = {
    EntitySource.SCHEMA: "(from schema)",
    EntitySource.INFERRED: "(inferred)",
    EntitySource.USER: "(user supplied)",
}


def render_report(
    model: AppModel,
    files: Sequence[GeneratedFile],
    diagnostics: Sequence[Diagnostic] = (),
) -> str:
    """Summarize the model with its TODOs and the run's warnings."""
    lines = [
        f"# Import Report: {model.app_name}",
        "",
        f"**Project:** {model.project_root}",
        "",
        "## Summary",
        "",
        f"- **Entities:** {len(model.entities)}",
        f"- **Views:** {len(model.views)}",
        f"- **Actions:** {len(model.actions)}",
        f"- **Generated Files:** {len(files)}",
        "",
    ]

    if model.entities:
        lines += ["## Entities", ""]
        for entity in model.entities:
            lines.append(
                f"- **{entity.name}** {_SOURCE_LABELS[entity.source]} - {len(entity.fields)} fields"
            )
        lines.append("")

    if model.views:
        lines += ["## Views", ""]
        for view in model.views:
            route = f" `{view.route}`" if view.route else ""
            lines.append(f"- **{view.name}**{route} - {len(view.widgets)} widgets")
        lines.append("")

    if model.actions:
        lines += ["## Actions", ""]
        for action in model.actions:
            lines.append(f"- **{action.name}** ({action.source.value}) - {len(action.api_calls)} API calls")
        lines.append("")

    if model.todos:
        lines += ["## TODOs", ""]
        lines.extend(f"- {todo}" for todo in model.todos)
        lines.append("")

    action_todos = [(action.name, todo) for action in model.actions for todo in action.todos]
    if action_todos:
        lines += ["## Action TODOs", ""]
        lines.extend(f"- **{name}**: {todo}" for name, todo in action_todos)
        lines.append("")

    if diagnostics:
        lines += ["## Warnings", ""]
        lines.extend(f"- {diagnostic.format()}" for diagnostic in diagnostics)
        lines.append("")

    main_file = files[0].file_name if files else f"{model.app_name}.shep"
    lines += [
        "## Next Steps",
        "",
        f"1. Review the generated `.shep` file: `{main_file}`",
        "2. Fill in TODO comments with your business logic",
        "3. Refine entity fields and add validation rules",
        "4. Customize view layouts and widgets",
        "5. Test your app with `sheplang dev`",
    ]
    return "\n".join(lines) + "\n"
