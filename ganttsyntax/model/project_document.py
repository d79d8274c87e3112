"""
The structured form of a gantt chart: config, sections, tasks and tags.

Parsing produces a ProjectDocument, serializing consumes one.
Python attributes are snake_case, the JSON form is camelCase, so documents
can be exchanged with the store that holds the project, e.g. ``startDate``.

PROMPT> python -m ganttsyntax.model.project_document
"""
from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = ""
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_AXIS_FORMAT = "%Y-%m-%d"

class TaskStatus(str, Enum):
    active = 'active'
    done = 'done'
    crit = 'crit'
    milestone = 'milestone'
    # The task line carries no status keyword.
    none = 'none'

    @classmethod
    def from_keyword(cls, keyword: str) -> Optional["TaskStatus"]:
        """Status keyword as written in a task line. Case-insensitive. None for non-keywords."""
        normalized = keyword.strip().lower()
        if normalized == cls.none.value:
            return None
        try:
            return cls(normalized)
        except ValueError:
            return None

class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

class GanttConfig(DocumentModel):
    title: str = Field(default=DEFAULT_TITLE, description="Shown at the top of the chart.")
    date_format: str = Field(default=DEFAULT_DATE_FORMAT, description="Template with YYYY, MM, DD tokens.")
    axis_format: str = Field(default=DEFAULT_AXIS_FORMAT, description="strftime-like format for the axis labels.")
    excludes: list[str] = Field(default_factory=list, description="Exclusion tokens, e.g. 'weekends' or literal dates.")

class Section(DocumentModel):
    id: str
    name: str
    order: int = Field(description="Display rank, lowest first.")

class Tag(DocumentModel):
    id: str
    name: str
    color: Optional[str] = None

class Task(DocumentModel):
    id: str
    title: str
    section_id: Optional[str] = None
    start_date: date
    end_date: date
    status: TaskStatus = TaskStatus.none
    dependencies: list[str] = Field(
        default_factory=list,
        description="Ids of the tasks this task starts after. The first one is written as 'after <alias>'."
    )
    parent_id: Optional[str] = None
    is_milestone: bool = False
    color: Optional[str] = None
    tags: list[str] = Field(default_factory=list, description="Tag ids.")
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    notes: Optional[str] = None

class ProjectDocument(DocumentModel):
    config: GanttConfig = Field(default_factory=GanttConfig)
    sections: list[Section] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_unique_ids(self) -> "ProjectDocument":
        for kind, ids in (("section", [s.id for s in self.sections]), ("task", [t.id for t in self.tasks])):
            seen: set[str] = set()
            for item_id in ids:
                if item_id in seen:
                    raise ValueError(f"Duplicate {kind} id: {item_id!r}")
                seen.add(item_id)
        return self

    def task_by_id(self) -> dict[str, Task]:
        return {task.id: task for task in self.tasks}

    def section_by_id(self) -> dict[str, Section]:
        return {section.id: section for section in self.sections}

if __name__ == "__main__":
    document = ProjectDocument(
        config=GanttConfig(title="Website"),
        sections=[Section(id="s1", name="Build", order=0)],
        tasks=[
            Task(id="t1", title="Design", section_id="s1", start_date=date(2024, 1, 8), end_date=date(2024, 1, 14), status=TaskStatus.active),
        ],
    )
    print(document.model_dump_json(indent=2, by_alias=True))
