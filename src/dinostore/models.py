"""Dino entity and its relational table mapping."""

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Dino(BaseModel):
    """A dino record exchanged between the HTTP layer and the repositories.

    Only the shape is validated: empty names or negative weights are stored as
    given.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID | None = None
    name: str
    weight: int
    diet: str


class Base(DeclarativeBase):
    pass


class DinoRecord(Base):
    __tablename__ = "dinos"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
    diet: Mapped[str] = mapped_column(String, nullable=False)
