"""
CSV serialization of a ProjectDocument, for spreadsheets.

One row per task with 14 fixed columns. Fields containing commas, quotes or
newlines are quoted according to standard CSV conventions. The output starts
with a UTF-8 BOM by default, otherwise Excel guesses the wrong encoding.

Dependencies and tags are written by name, since the CSV has no id column.
The `;` separated names can be read back by ImportGanttCSV.

PROMPT> python -m ganttsyntax.spreadsheet.export_gantt_csv
"""
import logging
from typing import Optional
from ganttsyntax.model.project_document import ProjectDocument, Task, TaskStatus
from ganttsyntax.spreadsheet.csv_parser import BOM, escape_csv_value
from ganttsyntax.utils.date_utils import DEFAULT_DATE_FORMAT, format_date

logger = logging.getLogger(__name__)

CSV_HEADERS: list[str] = [
    'Title',
    'Section',
    'Start Date',
    'End Date',
    'Status',
    'Dependencies',
    'Is Milestone',
    'Color',
    'Tags',
    'Estimated Hours',
    'Actual Hours',
    'Estimated Cost',
    'Actual Cost',
    'Notes',
]

LIST_SEPARATOR = ';'

def format_number(value: Optional[float]) -> str:
    """Whole numbers without a decimal part: 12.0 -> "12", 1.5 -> "1.5", None -> ""."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)

class ExportGanttCSV:
    @staticmethod
    def _task_row(task: Task, section_names: dict[str, str], task_titles: dict[str, str], tag_names: dict[str, str], date_format: str) -> list[str]:
        section_name = section_names.get(task.section_id, "") if task.section_id else ""
        dependency_names = [task_titles.get(dependency_id, dependency_id) for dependency_id in task.dependencies]
        tag_list = [tag_names.get(tag_id, tag_id) for tag_id in task.tags]
        status = "" if task.status == TaskStatus.none else task.status.value
        return [
            task.title,
            section_name,
            format_date(task.start_date, date_format),
            format_date(task.end_date, date_format),
            status,
            LIST_SEPARATOR.join(dependency_names),
            "Yes" if task.is_milestone else "No",
            task.color or "",
            LIST_SEPARATOR.join(tag_list),
            format_number(task.estimated_hours),
            format_number(task.actual_hours),
            format_number(task.estimated_cost),
            format_number(task.actual_cost),
            task.notes or "",
        ]

    @staticmethod
    def to_gantt_csv(
        document: ProjectDocument,
        date_format: str = DEFAULT_DATE_FORMAT,
        *,
        include_headers: bool = True,
        include_bom: bool = True,
    ) -> str:
        if not isinstance(document, ProjectDocument):
            raise ValueError("document must be a ProjectDocument")

        section_names = {section.id: section.name for section in document.sections}
        task_titles = {task.id: task.title for task in document.tasks}
        tag_names = {tag.id: tag.name for tag in document.tags}

        lines: list[str] = []
        if include_headers:
            lines.append(",".join(escape_csv_value(header) for header in CSV_HEADERS))

        for task in document.tasks:
            row = ExportGanttCSV._task_row(task, section_names, task_titles, tag_names, date_format)
            lines.append(",".join(escape_csv_value(value) for value in row))

        logger.debug(f"Exported {len(document.tasks)} tasks to CSV")
        csv_text = "\n".join(lines)
        if include_bom:
            return BOM + csv_text
        return csv_text

    @staticmethod
    def save(document: ProjectDocument, path: str, **kwargs) -> None:
        csv_text = ExportGanttCSV.to_gantt_csv(document, **kwargs)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(csv_text)

if __name__ == "__main__":
    from ganttsyntax.mermaid.parse_mermaid_gantt import parse_mermaid_gantt
    from ganttsyntax.utils.dedent_strip import dedent_strip

    input = dedent_strip("""
        gantt
            dateFormat YYYY-MM-DD
            section Design
            Design, wireframes :active, des1, 2024-01-08, 7d
            Build :after des1, 5d
    """)
    document = parse_mermaid_gantt(input)
    print(ExportGanttCSV.to_gantt_csv(document, include_bom=False))
