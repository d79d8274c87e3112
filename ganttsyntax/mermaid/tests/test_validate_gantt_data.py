import unittest
from datetime import date
from ganttsyntax.mermaid.parse_mermaid_gantt import validate_gantt_data
from ganttsyntax.model.project_document import ProjectDocument, Task

def make_task(id: str, dependencies: list[str] = [], start: date = date(2024, 1, 1), end: date = date(2024, 1, 2)) -> Task:
    return Task(id=id, title=f"Task {id.upper()}", start_date=start, end_date=end, dependencies=list(dependencies))

class TestValidateGanttData(unittest.TestCase):
    def test_no_problems(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("a"),
            make_task("b", ["a"]),
            make_task("c", ["a", "b"]),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(errors, [])

    def test_empty_document(self):
        self.assertEqual(validate_gantt_data(ProjectDocument()), [])

    def test_cycle(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("a", ["b"]),
            make_task("b", ["a"]),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(errors, ["Circular dependency detected involving task: Task A"])

    def test_self_dependency(self):
        document = ProjectDocument(tasks=[make_task("a", ["a"])])
        self.assertEqual(validate_gantt_data(document), ["Circular dependency detected involving task: Task A"])

    def test_only_the_first_cycle_is_reported(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("a", ["b"]),
            make_task("b", ["a"]),
            make_task("c", ["d"]),
            make_task("d", ["c"]),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(len(errors), 1)

    def test_long_cycle_reached_from_a_task_outside_it(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("x", ["a"]),
            make_task("a", ["b"]),
            make_task("b", ["c"]),
            make_task("c", ["a"]),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(errors, ["Circular dependency detected involving task: Task X"])

    def test_diamond_is_not_a_cycle(self):
        document = ProjectDocument(tasks=[
            make_task("a"),
            make_task("b", ["a"]),
            make_task("c", ["a"]),
            make_task("d", ["b", "c"]),
        ])
        self.assertEqual(validate_gantt_data(document), [])

    def test_unknown_dependency_is_ignored(self):
        document = ProjectDocument(tasks=[make_task("a", ["missing"])])
        self.assertEqual(validate_gantt_data(document), [])

    def test_end_before_start(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("a", start=date(2024, 1, 10), end=date(2024, 1, 5)),
            make_task("b"),
            make_task("c", start=date(2024, 3, 1), end=date(2024, 2, 1)),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(errors, [
            'Task "Task A" has end date before start date',
            'Task "Task C" has end date before start date',
        ])

    def test_cycle_is_reported_before_date_problems(self):
        # Arrange
        document = ProjectDocument(tasks=[
            make_task("a", start=date(2024, 1, 10), end=date(2024, 1, 5)),
            make_task("b", ["b"]),
        ])

        # Act
        errors = validate_gantt_data(document)

        # Assert
        self.assertEqual(errors, [
            "Circular dependency detected involving task: Task B",
            'Task "Task A" has end date before start date',
        ])
