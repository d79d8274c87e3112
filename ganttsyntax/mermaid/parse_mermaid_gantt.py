"""
Parse Mermaid Gantt syntax into a ProjectDocument.
https://mermaid.js.org/syntax/gantt.html

The input is often pasted by a user or written by an LLM, so the parser is
forgiving: lines it doesn't understand are skipped, unparseable dates become
today, unparseable durations become 1 day. Durations that run past year 9999
end one day after the start. It never raises on bad input.

Task line grammar:
    <title> : [status,] [alias,] <start date | after alias>, <duration | end date>

Examples:
    Research :done, p1, 2024-01-01, 7d
    Requirements :active, p2, after p1, 5d
    Sprint 1 :s1, 2024-01-15, 14d
    Launch :milestone, m1, 2024-02-01, 1d

An alias must be defined before it's referenced by 'after'.
Forward references resolve to today, with no dependency.

PROMPT> python -m ganttsyntax.mermaid.parse_mermaid_gantt
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from ganttsyntax.model.project_document import GanttConfig, ProjectDocument, Section, Task, TaskStatus
from ganttsyntax.utils.date_utils import add_days, parse_date, parse_duration
from ganttsyntax.utils.generate_id import generate_unique_id

logger = logging.getLogger(__name__)

ISO_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SLASH_DATE_SHAPE = re.compile(r"^\d{2}/\d{2}/\d{4}$")

AFTER_PREFIX = "after "

@dataclass
class ParseContext:
    today: date
    config: GanttConfig = field(default_factory=GanttConfig)
    current_section: Optional[Section] = None
    sections: list[Section] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    tasks_by_alias: dict[str, Task] = field(default_factory=dict)
    used_ids: set[str] = field(default_factory=set)

    def next_id(self) -> str:
        new_id = generate_unique_id(self.used_ids)
        self.used_ids.add(new_id)
        return new_id

def is_date_like(text: str, date_format: str) -> bool:
    """Same length as the date format, and shaped like 2024-01-15 or 15/01/2024."""
    if len(text) != len(date_format):
        return False
    return bool(ISO_DATE_SHAPE.match(text) or SLASH_DATE_SHAPE.match(text))

def _resolve_start(start_spec: str, ctx: ParseContext) -> tuple[date, list[str]]:
    """The start date and the dependencies implied by the start field."""
    if start_spec.startswith(AFTER_PREFIX):
        dependency_alias = start_spec[len(AFTER_PREFIX):].strip()
        dependency = ctx.tasks_by_alias.get(dependency_alias)
        if dependency is None:
            logger.debug(f"Unknown alias {dependency_alias!r}, starting today")
            return ctx.today, []
        try:
            start_date = add_days(dependency.end_date, 1)
        except OverflowError:
            logger.debug(f"Task {dependency_alias!r} ends on the last representable date, starting today")
            return ctx.today, [dependency.id]
        return start_date, [dependency.id]

    start_date = parse_date(start_spec, ctx.config.date_format)
    if start_date is None:
        logger.debug(f"Cannot parse start date {start_spec!r} with format {ctx.config.date_format!r}, starting today")
        return ctx.today, []
    return start_date, []

def _day_after(d: date) -> date:
    """One day after d, or d itself when d is date.max."""
    if d == date.max:
        return d
    return add_days(d, 1)

def _resolve_end(duration_spec: str, start_date: date, ctx: ParseContext) -> date:
    if is_date_like(duration_spec, ctx.config.date_format):
        end_date = parse_date(duration_spec, ctx.config.date_format)
        if end_date is None:
            logger.debug(f"Cannot parse end date {duration_spec!r}, using one day after start")
            end_date = _day_after(start_date)
    else:
        try:
            end_date = add_days(start_date, parse_duration(duration_spec) - 1)
        except OverflowError:
            # Digits-only dates, e.g. 20240115 with dateFormat YYYYMMDD, are read as a duration.
            logger.debug(f"Duration {duration_spec!r} is out of range, using one day after start")
            end_date = _day_after(start_date)

    if end_date < start_date:
        # A '0d' duration or an end date before the start.
        logger.debug(f"End date {end_date} is before start date {start_date}, clamping to the start date")
        end_date = start_date
    return end_date

def parse_task_line(line: str, ctx: ParseContext) -> Optional[Task]:
    """
    Parse a task line and append the task to the context.
    Returns None when the line doesn't describe a task.
    """
    colon_index = line.find(':')
    if colon_index < 0:
        return None

    title = line[:colon_index].strip()
    rest = line[colon_index + 1:].strip()
    if not title or not rest:
        logger.debug(f"Skipping task line without title or fields: {line!r}")
        return None

    parts = [part.strip() for part in rest.split(',')]
    part_index = 0

    status = TaskStatus.from_keyword(parts[0])
    if status is not None:
        part_index += 1
    else:
        status = TaskStatus.none

    alias: Optional[str] = None
    if part_index < len(parts):
        candidate = parts[part_index]
        if not candidate.startswith('after') and not is_date_like(candidate, ctx.config.date_format):
            alias = candidate
            part_index += 1

    if part_index + 2 > len(parts):
        logger.debug(f"Skipping task line with too few parts: {line!r}")
        return None

    start_spec = parts[part_index]
    duration_spec = parts[part_index + 1]

    start_date, dependencies = _resolve_start(start_spec, ctx)
    end_date = _resolve_end(duration_spec, start_date, ctx)

    task = Task(
        id=ctx.next_id(),
        title=title,
        section_id=ctx.current_section.id if ctx.current_section else None,
        start_date=start_date,
        end_date=end_date,
        status=status,
        dependencies=dependencies,
        is_milestone=(status == TaskStatus.milestone),
    )
    ctx.tasks.append(task)
    if alias:
        ctx.tasks_by_alias[alias] = task
    return task

def parse_mermaid_gantt(text: str, today: Optional[date] = None) -> ProjectDocument:
    """
    Parse Mermaid Gantt text into a ProjectDocument.

    Parameters
    ----------
    text
        The gantt text, with or without the leading ``gantt`` line.
    today
        Used when a start date cannot be determined. Defaults to ``date.today()``.
    """
    ctx = ParseContext(today=today or date.today())
    section_order = 0

    for raw_line in text.strip().split('\n'):
        line = raw_line.strip()

        if not line or line.startswith('%%'):
            continue

        if line == 'gantt':
            continue

        if line.startswith('title '):
            ctx.config.title = line[len('title '):].strip()
            continue

        if line.startswith('dateFormat '):
            ctx.config.date_format = line[len('dateFormat '):].strip()
            continue

        if line.startswith('axisFormat '):
            ctx.config.axis_format = line[len('axisFormat '):].strip()
            continue

        if line.startswith('excludes '):
            ctx.config.excludes = [item.strip() for item in line[len('excludes '):].split(',')]
            continue

        if line.startswith('section '):
            section = Section(
                id=ctx.next_id(),
                name=line[len('section '):].strip(),
                order=section_order,
            )
            section_order += 1
            ctx.sections.append(section)
            ctx.current_section = section
            continue

        if ':' in line:
            parse_task_line(line, ctx)
            continue

        logger.debug(f"Ignoring unrecognized line: {line!r}")

    logger.debug(f"Parsed {len(ctx.tasks)} tasks in {len(ctx.sections)} sections")
    return ProjectDocument(
        config=ctx.config,
        sections=ctx.sections,
        tasks=ctx.tasks,
        tags=[],
    )

def _find_cycle_start(document: ProjectDocument) -> Optional[Task]:
    """
    Depth-first search over the dependency graph, with an explicit stack.
    Returns the task whose traversal ran into a cycle, or None.
    """
    tasks = document.task_by_id()
    visited: set[str] = set()
    in_stack: set[str] = set()

    for root in document.tasks:
        if root.id in visited:
            continue
        visited.add(root.id)
        in_stack.add(root.id)
        # Each frame is a task id and an iterator over its dependencies.
        stack = [(root.id, iter(root.dependencies))]
        while stack:
            task_id, dependency_ids = stack[-1]
            dependency_id = next(dependency_ids, None)
            if dependency_id is None:
                stack.pop()
                in_stack.discard(task_id)
                continue
            if dependency_id in in_stack:
                return root
            if dependency_id in visited:
                continue
            visited.add(dependency_id)
            in_stack.add(dependency_id)
            dependency = tasks.get(dependency_id)
            stack.append((dependency_id, iter(dependency.dependencies if dependency else [])))
    return None

def validate_gantt_data(document: ProjectDocument) -> list[str]:
    """
    Problems with the document, as human readable messages. Empty when there are none.

    Reports the first circular dependency found, and every task that ends before it starts.
    Nothing is repaired.
    """
    errors: list[str] = []

    cycle_task = _find_cycle_start(document)
    if cycle_task is not None:
        errors.append(f"Circular dependency detected involving task: {cycle_task.title}")

    for task in document.tasks:
        if task.end_date < task.start_date:
            errors.append(f'Task "{task.title}" has end date before start date')

    return errors

if __name__ == "__main__":
    from ganttsyntax.utils.dedent_strip import dedent_strip

    logging.basicConfig(level=logging.DEBUG)

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
    print(document.model_dump_json(indent=2, by_alias=True))
    print(f"validation errors: {validate_gantt_data(document)!r}")
