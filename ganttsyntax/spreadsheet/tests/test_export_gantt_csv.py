import os
import tempfile
import unittest
from datetime import date
from ganttsyntax.model.project_document import ProjectDocument, Section, Tag, Task, TaskStatus
from ganttsyntax.spreadsheet.export_gantt_csv import ExportGanttCSV, format_number

HEADER_LINE = "Title,Section,Start Date,End Date,Status,Dependencies,Is Milestone,Color,Tags,Estimated Hours,Actual Hours,Estimated Cost,Actual Cost,Notes"

class TestExportGanttCSV(unittest.TestCase):
    def test_to_gantt_csv(self):
        # Arrange
        document = ProjectDocument(
            sections=[Section(id="s1", name="Build", order=0)],
            tasks=[
                Task(id="a", title="Design", section_id="s1", start_date=date(2024, 1, 8), end_date=date(2024, 1, 14), status=TaskStatus.active, tags=["t1", "t2"], estimated_hours=40.0, actual_hours=12.5),
                Task(id="b", title="Develop", section_id="s1", start_date=date(2024, 1, 15), end_date=date(2024, 1, 19), dependencies=["a"], estimated_cost=1500, color="#ff0000"),
                Task(id="c", title="Launch", start_date=date(2024, 1, 22), end_date=date(2024, 1, 22), dependencies=["a", "b"], is_milestone=True, notes="Go live"),
            ],
            tags=[Tag(id="t1", name="ux"), Tag(id="t2", name="frontend")],
        )

        # Act
        s = ExportGanttCSV.to_gantt_csv(document, include_bom=False)

        # Assert
        lines = [
            HEADER_LINE,
            "Design,Build,2024-01-08,2024-01-14,active,,No,,ux;frontend,40,12.5,,,",
            "Develop,Build,2024-01-15,2024-01-19,,Design,No,#ff0000,,,,1500,,",
            "Launch,,2024-01-22,2024-01-22,,Design;Develop,Yes,,,,,,,Go live",
        ]
        self.assertEqual(s, "\n".join(lines))

    def test_fields_with_dangerous_symbols_are_quoted(self):
        # Arrange
        document = ProjectDocument(tasks=[
            Task(id="a", title="Design, review", start_date=date(2024, 1, 8), end_date=date(2024, 1, 8), notes='Line1\nLine2 "quoted"'),
        ])

        # Act
        s = ExportGanttCSV.to_gantt_csv(document, include_bom=False)

        # Assert
        expected_row = '"Design, review",,2024-01-08,2024-01-08,,,No,,,,,,,"Line1\nLine2 ""quoted"""'
        self.assertEqual(s, HEADER_LINE + "\n" + expected_row)

    def test_bom_is_included_by_default(self):
        s = ExportGanttCSV.to_gantt_csv(ProjectDocument())
        self.assertEqual(s, "\ufeff" + HEADER_LINE)

    def test_without_headers(self):
        document = ProjectDocument(tasks=[Task(id="a", title="Design", start_date=date(2024, 1, 8), end_date=date(2024, 1, 9))])
        s = ExportGanttCSV.to_gantt_csv(document, include_headers=False, include_bom=False)
        self.assertEqual(s, "Design,,2024-01-08,2024-01-09,,,No,,,,,,,")

    def test_date_format(self):
        document = ProjectDocument(tasks=[Task(id="a", title="Design", start_date=date(2024, 1, 8), end_date=date(2024, 1, 9))])
        s = ExportGanttCSV.to_gantt_csv(document, "DD/MM/YYYY", include_headers=False, include_bom=False)
        self.assertTrue(s.startswith("Design,,08/01/2024,09/01/2024,"))

    def test_unknown_references_are_written_verbatim(self):
        # Arrange
        document = ProjectDocument(tasks=[
            Task(id="a", title="Design", section_id="gone", start_date=date(2024, 1, 8), end_date=date(2024, 1, 9), dependencies=["x1"], tags=["t9"]),
        ])

        # Act
        s = ExportGanttCSV.to_gantt_csv(document, include_headers=False, include_bom=False)

        # Assert
        self.assertEqual(s, "Design,,2024-01-08,2024-01-09,,x1,No,,t9,,,,,")

    def test_rejects_other_input(self):
        with self.assertRaises(ValueError):
            ExportGanttCSV.to_gantt_csv({"tasks": []})

    def test_save(self):
        # Arrange
        document = ProjectDocument(tasks=[Task(id="a", title="Design", start_date=date(2024, 1, 8), end_date=date(2024, 1, 9))])

        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "schedule.csv")

            # Act
            ExportGanttCSV.save(document, path, include_bom=False)

            # Assert
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        self.assertEqual(content, ExportGanttCSV.to_gantt_csv(document, include_bom=False))

class TestFormatNumber(unittest.TestCase):
    def test_format_number(self):
        self.assertEqual(format_number(None), "")
        self.assertEqual(format_number(12.0), "12")
        self.assertEqual(format_number(0), "0")
        self.assertEqual(format_number(1.5), "1.5")
