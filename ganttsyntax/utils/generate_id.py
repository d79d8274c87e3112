"""
Short identifiers for tasks and sections.

The ids only have to be unique within one document, so 7 characters
is plenty. Callers that build a document check for collisions with
the ids they have already handed out.
"""
from typing import Container
import uuid

ID_LENGTH = 7

def generate_id() -> str:
    """Generates a 7 character lowercase alphanumeric id."""
    return uuid.uuid4().hex[:ID_LENGTH]

def generate_unique_id(used_ids: Container[str]) -> str:
    """Generates an id that isn't among the used_ids."""
    while True:
        candidate = generate_id()
        if candidate not in used_ids:
            return candidate

if __name__ == "__main__":
    print(generate_id())
    print(generate_unique_id(set()))
