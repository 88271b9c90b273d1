import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statebook.db.base import BaseModel

DEFAULT_ELEMENT_TITLE = "Untitled element"


class Element(BaseModel):
    __tablename__ = "elements"

    title: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_ELEMENT_TITLE)
    figma_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    figma_file_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    figma_node_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_path: Mapped[str] = mapped_column(String(2000), nullable=False)
    image_name: Mapped[str] = mapped_column(String(500), nullable=False)
    image_type: Mapped[str] = mapped_column(String(100), nullable=False)
    image_size: Mapped[int] = mapped_column(Integer, nullable=False)
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    project = relationship("Project", back_populates="elements", lazy="selectin")
    states = relationship(
        "ElementState",
        back_populates="element",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
