"""
Import a CSV file, as written by ExportGanttCSV or edited in a spreadsheet, into a ProjectDocument.

The import is best effort. Missing columns are treated as empty, unparseable
dates fall back to today, unknown dependencies are dropped. Every repair is
reported in the error list, so the caller can show what went wrong.

Dependencies are `;` separated task titles. When several tasks share a
title, the first one wins.

PROMPT> python -m ganttsyntax.spreadsheet.import_gantt_csv
"""
import logging
from datetime import date
from typing import Optional
import pandas as pd
from pydantic import BaseModel, Field
from ganttsyntax.model.project_document import ProjectDocument, Section, Tag, Task, TaskStatus
from ganttsyntax.spreadsheet.csv_parser import parse_csv
from ganttsyntax.spreadsheet.export_gantt_csv import CSV_HEADERS, LIST_SEPARATOR
from ganttsyntax.utils.date_utils import DEFAULT_DATE_FORMAT, parse_date
from ganttsyntax.utils.generate_id import generate_unique_id

logger = logging.getLogger(__name__)

MILESTONE_TRUE_VALUES = ('yes', 'true', '1', 'y', 'x')

class CSVImportResult(BaseModel):
    document: ProjectDocument
    errors: list[str] = Field(default_factory=list)

class ImportGanttCSV:
    @staticmethod
    def _to_dataframe(headers: list[str], rows: list[list[str]]) -> pd.DataFrame:
        """
        Table with exactly the CSV_HEADERS columns. Header names are matched case-insensitively,
        short rows are padded, long rows are truncated, missing columns are empty.
        """
        canonical = {header.lower(): header for header in CSV_HEADERS}
        columns = [canonical.get(header.strip().lower(), header.strip()) for header in headers]
        width = len(columns)
        normalized_rows = [(row + [""] * width)[:width] for row in rows]
        df = pd.DataFrame(normalized_rows, columns=columns, dtype=str)
        df = df.loc[:, ~df.columns.duplicated()]
        return df.reindex(columns=CSV_HEADERS, fill_value="")

    @staticmethod
    def _parse_number(value: str, column: str, row_number: int, errors: list[str]) -> Optional[float]:
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            errors.append(f"Row {row_number}: Invalid number in '{column}': {value!r}")
            return None

    @staticmethod
    def from_csv(content: str, date_format: str = DEFAULT_DATE_FORMAT, today: Optional[date] = None) -> CSVImportResult:
        today = today or date.today()
        parsed = parse_csv(content)
        errors = list(parsed.errors)
        if not parsed.headers:
            return CSVImportResult(document=ProjectDocument(), errors=errors)

        df = ImportGanttCSV._to_dataframe(parsed.headers, parsed.rows)
        used_ids: set[str] = set()

        def next_id() -> str:
            new_id = generate_unique_id(used_ids)
            used_ids.add(new_id)
            return new_id

        sections_by_name: dict[str, Section] = {}
        tags_by_name: dict[str, Tag] = {}
        tasks: list[Task] = []
        dependency_names_by_task_id: dict[str, list[str]] = {}
        task_id_by_title: dict[str, str] = {}

        # Row 1 is the header row.
        for row_number, record in enumerate(df.to_dict(orient="records"), start=2):
            values = {column: (record.get(column) or "").strip() for column in CSV_HEADERS}

            title = values['Title']
            if not title:
                errors.append(f"Row {row_number}: Missing title, row skipped")
                continue

            section_id: Optional[str] = None
            section_name = values['Section']
            if section_name:
                section = sections_by_name.get(section_name)
                if section is None:
                    section = Section(id=next_id(), name=section_name, order=len(sections_by_name))
                    sections_by_name[section_name] = section
                section_id = section.id

            start_date = parse_date(values['Start Date'], date_format)
            if start_date is None:
                errors.append(f"Row {row_number}: Invalid start date {values['Start Date']!r}, using today")
                start_date = today

            end_date = parse_date(values['End Date'], date_format)
            if end_date is None:
                errors.append(f"Row {row_number}: Invalid end date {values['End Date']!r}, using the start date")
                end_date = start_date
            elif end_date < start_date:
                errors.append(f"Row {row_number}: End date {values['End Date']!r} is before the start date, using the start date")
                end_date = start_date

            status = TaskStatus.none
            if values['Status']:
                keyword_status = TaskStatus.from_keyword(values['Status'])
                if keyword_status is None and values['Status'].lower() != TaskStatus.none.value:
                    errors.append(f"Row {row_number}: Unknown status {values['Status']!r}")
                status = keyword_status or TaskStatus.none

            tag_ids: list[str] = []
            for tag_name in (name.strip() for name in values['Tags'].split(LIST_SEPARATOR)):
                if not tag_name:
                    continue
                tag = tags_by_name.get(tag_name)
                if tag is None:
                    tag = Tag(id=next_id(), name=tag_name)
                    tags_by_name[tag_name] = tag
                tag_ids.append(tag.id)

            task = Task(
                id=next_id(),
                title=title,
                section_id=section_id,
                start_date=start_date,
                end_date=end_date,
                status=status,
                is_milestone=values['Is Milestone'].lower() in MILESTONE_TRUE_VALUES,
                color=values['Color'] or None,
                tags=tag_ids,
                estimated_hours=ImportGanttCSV._parse_number(values['Estimated Hours'], 'Estimated Hours', row_number, errors),
                actual_hours=ImportGanttCSV._parse_number(values['Actual Hours'], 'Actual Hours', row_number, errors),
                estimated_cost=ImportGanttCSV._parse_number(values['Estimated Cost'], 'Estimated Cost', row_number, errors),
                actual_cost=ImportGanttCSV._parse_number(values['Actual Cost'], 'Actual Cost', row_number, errors),
                notes=values['Notes'] or None,
            )
            tasks.append(task)
            task_id_by_title.setdefault(title, task.id)
            dependency_names_by_task_id[task.id] = [
                name.strip() for name in values['Dependencies'].split(LIST_SEPARATOR) if name.strip()
            ]

        # Dependencies may refer to tasks further down, so resolve them once all tasks exist.
        for task in tasks:
            for name in dependency_names_by_task_id[task.id]:
                dependency_id = task_id_by_title.get(name)
                if dependency_id is None or dependency_id == task.id:
                    errors.append(f"Task {task.title!r}: Unknown dependency {name!r}")
                    continue
                if dependency_id not in task.dependencies:
                    task.dependencies.append(dependency_id)

        logger.debug(f"Imported {len(tasks)} tasks from CSV with {len(errors)} errors")
        document = ProjectDocument(
            sections=list(sections_by_name.values()),
            tasks=tasks,
            tags=list(tags_by_name.values()),
        )
        return CSVImportResult(document=document, errors=errors)

if __name__ == "__main__":
    from ganttsyntax.utils.dedent_strip import dedent_strip

    logging.basicConfig(level=logging.DEBUG)

    input = dedent_strip("""
        Title,Section,Start Date,End Date,Status,Dependencies
        Design,Build,2024-01-08,2024-01-14,active,
        Develop,Build,2024-01-15,2024-01-19,,Design
    """)
    result = ImportGanttCSV.from_csv(input)
    print(result.model_dump_json(indent=2, by_alias=True))
