"""Student model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from institute_api.core.database import Base
from institute_api.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student model for managing student records."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    # Filename inside the student image directory, set once an image is attached
    image_name: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name}, email={self.email})>"
