"""
JSON serialization of a ProjectDocument, with full fidelity.

Stored documents come from older versions and from hand edits, so loading is
lenient: dates may be plain ISO dates or ISO timestamps, missing optional
fields get their defaults, and broken dates are repaired instead of rejected.

PROMPT> python -m ganttsyntax.model.serialize
"""
import json
import logging
from datetime import date
from typing import Any, Optional
from ganttsyntax.model.project_document import ProjectDocument
from ganttsyntax.utils.date_utils import add_days

logger = logging.getLogger(__name__)

# Length of "YYYY-MM-DD", the date part of an ISO timestamp.
ISO_DATE_LENGTH = 10

DEFAULT_TASK_LENGTH_DAYS = 6

# Stored as null by older documents. Both the camelCase and the snake_case key are accepted.
NULLABLE_TASK_DEFAULTS = (
    (("dependencies",), list),
    (("tags",), list),
    (("isMilestone", "is_milestone"), bool),
)

def export_to_json(document: ProjectDocument) -> str:
    return document.model_dump_json(indent=2, by_alias=True)

def _parse_stored_date(value: Any) -> Optional[date]:
    """'2024-01-08' or '2024-01-08T00:00:00.000Z'. None when it isn't a date."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:ISO_DATE_LENGTH])
    except ValueError:
        return None

def _repair_task(raw_task: dict[str, Any], today: date) -> dict[str, Any]:
    if not isinstance(raw_task, dict):
        # Left for model_validate to report.
        return raw_task
    task = dict(raw_task)
    title = task.get("title")

    start_date = _parse_stored_date(task.get("startDate", task.get("start_date")))
    if start_date is None:
        logger.warning(f"Invalid start date in task {title!r}: {task.get('startDate')!r}, using today")
        start_date = today

    end_date = _parse_stored_date(task.get("endDate", task.get("end_date")))
    if end_date is None:
        logger.warning(f"Invalid end date in task {title!r}: {task.get('endDate')!r}, using today + {DEFAULT_TASK_LENGTH_DAYS} days")
        end_date = add_days(today, DEFAULT_TASK_LENGTH_DAYS)

    if end_date < start_date:
        logger.warning(f"End date before start date in task {title!r}, using the start date")
        end_date = start_date

    task.pop("start_date", None)
    task.pop("end_date", None)
    task["startDate"] = start_date
    task["endDate"] = end_date
    if task.get("status") is None:
        # Older documents store a missing status as null.
        task["status"] = "none"
    for keys, default in NULLABLE_TASK_DEFAULTS:
        for key in keys:
            if key in task and task[key] is None:
                task[key] = default()
    return task

def deserialize_project_document(data: dict[str, Any], today: Optional[date] = None) -> ProjectDocument:
    """
    Build a ProjectDocument from its JSON-compatible dict form.
    Raises pydantic.ValidationError when the structure is wrong, e.g. a task without an id.
    """
    if not isinstance(data, dict):
        raise ValueError("data must be a dict")
    today = today or date.today()
    repaired = dict(data)
    repaired["tasks"] = [_repair_task(task, today) for task in data.get("tasks") or []]
    for key in ("sections", "tags"):
        if repaired.get(key) is None:
            repaired[key] = []
    config = repaired.get("config")
    if config is None:
        repaired.pop("config", None)
    elif isinstance(config, dict):
        repaired["config"] = {key: value for key, value in config.items() if value is not None}
    return ProjectDocument.model_validate(repaired)

def import_from_json(text: str, today: Optional[date] = None) -> ProjectDocument:
    """
    Parse the JSON written by export_to_json.
    Raises json.JSONDecodeError or pydantic.ValidationError on malformed input.
    """
    return deserialize_project_document(json.loads(text), today=today)

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    stored = """
    {
        "config": {"title": "Demo", "dateFormat": "YYYY-MM-DD", "axisFormat": "%Y-%m-%d", "excludes": []},
        "sections": [],
        "tasks": [
            {"id": "a", "title": "Design", "sectionId": null, "startDate": "2024-01-08T00:00:00.000Z",
             "endDate": "2024-01-05T00:00:00.000Z", "status": null, "dependencies": []}
        ],
        "tags": []
    }
    """
    document = import_from_json(stored)
    print(export_to_json(document))
