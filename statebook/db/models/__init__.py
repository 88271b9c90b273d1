from statebook.db.models.element import Element
from statebook.db.models.project import Project
from statebook.db.models.state import ElementState

__all__ = [
    "Element",
    "ElementState",
    "Project",
]
