import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statebook.common.enums import StateType
from statebook.db.base import BaseModel


class ElementState(BaseModel):
    __tablename__ = "element_states"

    element_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("elements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[StateType] = mapped_column(String(20), nullable=False, default=StateType.INFO)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    locale: Mapped[str] = mapped_column(String(20), nullable=False, default="en")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    element = relationship("Element", back_populates="states", lazy="selectin")
