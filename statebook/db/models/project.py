from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statebook.db.base import BaseModel


class Project(BaseModel):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    elements = relationship("Element", back_populates="project", passive_deletes=True, lazy="selectin")
