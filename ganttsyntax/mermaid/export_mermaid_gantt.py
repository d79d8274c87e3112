"""
Export a ProjectDocument as Mermaid Gantt syntax.
https://github.com/mermaid-js/mermaid

Every task gets an alias, so dependencies can be written as 'after <alias>'.
Only the first dependency of a task can be expressed this way, the Mermaid
syntax has no notion of multiple predecessors with different dependency types.
The text is meant to be parsed again by parse_mermaid_gantt, and pasted into
other Mermaid compatible tools.

Titles are written as is. A title containing a colon is cut at the colon when
parsed again, and a title starting with a directive keyword (title, section,
dateFormat, axisFormat, excludes) or with %% makes the parser skip the task.
Both cases are logged as warnings.

PROMPT> python -m ganttsyntax.mermaid.export_mermaid_gantt
"""
import logging
import re
from typing import Optional
from ganttsyntax.model.project_document import DEFAULT_AXIS_FORMAT, ProjectDocument, Task, TaskStatus
from ganttsyntax.utils.date_utils import diff_days, format_date

logger = logging.getLogger(__name__)

INDENT = "    "
UNCATEGORIZED_SECTION_NAME = "Uncategorized"
ALIAS_PREFIX_LENGTH = 3

# Lines starting with these are not task lines to parse_mermaid_gantt.
DIRECTIVE_PREFIXES = ("%%", "title ", "dateFormat ", "axisFormat ", "excludes ", "section ")

def generate_task_aliases(tasks: list[Task], counter: int = 1) -> tuple[dict[str, str], int]:
    """
    Assign an alias to every task: the first 3 alphanumeric characters of the
    lowercased title, followed by a counter. E.g. "Design review" -> "des1".

    The counter is shared by all tasks, so the aliases are unique even when
    the prefixes collide.

    Returns the task id to alias dict, and the next counter value.
    """
    aliases: dict[str, str] = {}
    for task in tasks:
        prefix = re.sub(r"[^a-z0-9]", "", task.title.lower())[:ALIAS_PREFIX_LENGTH]
        aliases[task.id] = f"{prefix}{counter}"
        counter += 1
    return aliases, counter

class ExportMermaidGantt:
    @staticmethod
    def _format_status(task: Task) -> Optional[str]:
        """The milestone flag takes precedence over the status."""
        if task.is_milestone:
            return TaskStatus.milestone.value
        if task.status == TaskStatus.none:
            return None
        return task.status.value

    @staticmethod
    def _format_task(task: Task, task_aliases: dict[str, str], date_format: str) -> str:
        parts: list[str] = []

        status = ExportMermaidGantt._format_status(task)
        if status:
            parts.append(status)

        alias = task_aliases.get(task.id)
        if alias:
            parts.append(alias)

        start_spec: Optional[str] = None
        if task.dependencies:
            dependency_alias = task_aliases.get(task.dependencies[0])
            if dependency_alias:
                start_spec = f"after {dependency_alias}"
            else:
                logger.debug(f"Task {task.id!r} depends on unknown task {task.dependencies[0]!r}, writing the start date instead")
        if start_spec is None:
            start_spec = format_date(task.start_date, date_format)
        parts.append(start_spec)

        duration = diff_days(task.start_date, task.end_date) + 1
        parts.append(f"{duration}d")

        line = f"{task.title} :{', '.join(parts)}"
        if line.strip().startswith(DIRECTIVE_PREFIXES):
            logger.warning(f"Task {task.id!r} is titled {task.title!r}, which reads as a directive or comment. The task is lost when parsed again.")
        elif ':' in task.title:
            logger.warning(f"Task {task.id!r} is titled {task.title!r}, which contains a colon. The title is cut at the colon when parsed again.")
        return line

    @staticmethod
    def to_mermaid_gantt(document: ProjectDocument) -> str:
        """
        Return the Mermaid Gantt text for the document.

        Tasks are grouped by section in the declared section order.
        Tasks without a section come last, under an "Uncategorized" section
        if the document has any sections, otherwise without a section header.
        """
        config = document.config
        lines: list[str] = ["gantt"]

        if config.title:
            lines.append(f"{INDENT}title {config.title}")
        lines.append(f"{INDENT}dateFormat {config.date_format}")
        if config.axis_format and config.axis_format != DEFAULT_AXIS_FORMAT:
            lines.append(f"{INDENT}axisFormat {config.axis_format}")
        if config.excludes:
            lines.append(f"{INDENT}excludes {', '.join(config.excludes)}")

        task_aliases, _ = generate_task_aliases(document.tasks)

        tasks_by_section: dict[Optional[str], list[Task]] = {}
        for task in document.tasks:
            tasks_by_section.setdefault(task.section_id, []).append(task)

        for section in document.sections:
            lines.append(f"{INDENT}section {section.name}")
            for task in tasks_by_section.get(section.id, []):
                lines.append(f"{INDENT}{ExportMermaidGantt._format_task(task, task_aliases, config.date_format)}")

        # Tasks referring to a section that doesn't exist are emitted with the unsectioned tasks.
        section_ids = {section.id for section in document.sections}
        orphan_tasks = [task for task in document.tasks if task.section_id not in section_ids]
        if orphan_tasks and document.sections:
            lines.append(f"{INDENT}section {UNCATEGORIZED_SECTION_NAME}")
        for task in orphan_tasks:
            lines.append(f"{INDENT}{ExportMermaidGantt._format_task(task, task_aliases, config.date_format)}")

        return "\n".join(lines)

    @staticmethod
    def save(document: ProjectDocument, path: str) -> None:
        """Write the Mermaid Gantt text to a file, e.g. ``schedule.mmd``."""
        mermaid_code = ExportMermaidGantt.to_mermaid_gantt(document)
        with open(path, "w", encoding="utf-8") as fp:
            fp.write(mermaid_code)
            fp.write("\n")

if __name__ == "__main__":
    from ganttsyntax.mermaid.parse_mermaid_gantt import parse_mermaid_gantt
    from ganttsyntax.utils.dedent_strip import dedent_strip

    input = dedent_strip("""
        gantt
            title Website relaunch
            dateFormat YYYY-MM-DD
            section Design
            Design :active, des1, 2024-01-08, 7d
            Build :after des1, 5d
            section Release
            Launch :milestone, 2024-01-22, 1d
    """)
    document = parse_mermaid_gantt(input)
    print(ExportMermaidGantt.to_mermaid_gantt(document))
