import json
import unittest
from datetime import date
from pydantic import ValidationError
from ganttsyntax.model.project_document import GanttConfig, ProjectDocument, Section, Tag, Task, TaskStatus
from ganttsyntax.model.serialize import export_to_json, import_from_json

TODAY = date(2024, 6, 1)

class TestSerializeJson(unittest.TestCase):
    def test_export_then_import_is_lossless(self):
        # Arrange
        document = ProjectDocument(
            config=GanttConfig(title="Relaunch", axis_format="%d %b", excludes=["weekends"]),
            sections=[Section(id="s1", name="Build", order=0)],
            tasks=[
                Task(id="a", title="Design", section_id="s1", start_date=date(2024, 1, 8), end_date=date(2024, 1, 14), status=TaskStatus.active, tags=["t1"], estimated_hours=12.5, notes="Wireframes"),
                Task(id="b", title="Build", section_id="s1", start_date=date(2024, 1, 15), end_date=date(2024, 1, 19), dependencies=["a"], parent_id="a", color="#ff0000"),
            ],
            tags=[Tag(id="t1", name="ux", color="#00ff00")],
        )

        # Act
        restored = import_from_json(export_to_json(document), today=TODAY)

        # Assert
        self.assertEqual(restored, document)

    def test_export_uses_camel_case_and_iso_dates(self):
        document = ProjectDocument(tasks=[Task(id="a", title="A", start_date=date(2024, 1, 8), end_date=date(2024, 1, 9))])
        data = json.loads(export_to_json(document))
        self.assertEqual(data["tasks"][0]["startDate"], "2024-01-08")
        self.assertIn("dateFormat", data["config"])

    def test_import_timestamps_and_null_status(self):
        # Arrange
        text = json.dumps({
            "config": {"title": "Demo", "dateFormat": "YYYY-MM-DD", "axisFormat": "%Y-%m-%d", "excludes": []},
            "sections": [],
            "tasks": [
                {"id": "a", "title": "Design", "sectionId": None, "startDate": "2024-01-08T00:00:00.000Z", "endDate": "2024-01-14T00:00:00.000Z", "status": None, "dependencies": []},
            ],
            "tags": [],
        })

        # Act
        document = import_from_json(text, today=TODAY)

        # Assert
        task = document.tasks[0]
        self.assertEqual(task.start_date, date(2024, 1, 8))
        self.assertEqual(task.end_date, date(2024, 1, 14))
        self.assertEqual(task.status, TaskStatus.none)
        self.assertIsNone(task.parent_id)
        self.assertEqual(task.tags, [])

    def test_import_null_task_fields_get_defaults(self):
        # Arrange
        text = json.dumps({
            "config": {"title": None, "dateFormat": "YYYY-MM-DD", "axisFormat": None, "excludes": None},
            "tasks": [
                {"id": "a", "title": "Design", "startDate": "2024-01-08", "endDate": "2024-01-14",
                 "dependencies": None, "tags": None, "isMilestone": None, "notes": None},
                {"id": "b", "title": "Launch", "start_date": "2024-01-15", "end_date": "2024-01-15",
                 "is_milestone": None},
            ],
        })

        # Act
        document = import_from_json(text, today=TODAY)

        # Assert
        a, b = document.tasks
        self.assertEqual(a.dependencies, [])
        self.assertEqual(a.tags, [])
        self.assertFalse(a.is_milestone)
        self.assertIsNone(a.notes)
        self.assertFalse(b.is_milestone)
        self.assertEqual(document.config, GanttConfig())

    def test_import_repairs_invalid_dates(self):
        # Arrange
        text = json.dumps({
            "tasks": [
                {"id": "a", "title": "No start", "startDate": "garbage", "endDate": "2024-07-01"},
                {"id": "b", "title": "No end", "startDate": "2024-06-03", "endDate": None},
                {"id": "c", "title": "Inverted", "startDate": "2024-06-10", "endDate": "2024-06-01"},
            ],
        })

        # Act
        with self.assertLogs("ganttsyntax.model.serialize", level="WARNING") as logs:
            document = import_from_json(text, today=TODAY)

        # Assert
        a, b, c = document.tasks
        self.assertEqual((a.start_date, a.end_date), (TODAY, date(2024, 7, 1)))
        self.assertEqual((b.start_date, b.end_date), (date(2024, 6, 3), date(2024, 6, 7)))
        self.assertEqual((c.start_date, c.end_date), (date(2024, 6, 10), date(2024, 6, 10)))
        self.assertEqual(len(logs.records), 3)

    def test_import_missing_collections(self):
        document = import_from_json('{"config": null, "sections": null, "tasks": null, "tags": null}', today=TODAY)
        self.assertEqual(document, ProjectDocument())

    def test_import_structural_error(self):
        with self.assertRaises(ValidationError):
            import_from_json('{"tasks": [{"title": "No id", "startDate": "2024-01-01", "endDate": "2024-01-01"}]}', today=TODAY)

    def test_import_not_an_object(self):
        with self.assertRaises(ValueError):
            import_from_json('[1, 2, 3]', today=TODAY)
