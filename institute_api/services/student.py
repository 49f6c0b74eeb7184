"""Student management service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from institute_api.core.exceptions import NotFoundError, StorageError, ValidationError
from institute_api.models.student import Student
from institute_api.schemas.student import StudentCreate, StudentUpdate
from institute_api.services.image_store import ImageStore, image_filename, is_valid_filename

logger = logging.getLogger(__name__)


class StudentService:
    """Student management service.

    Records go through ``db``; profile images go through ``image_store``.
    Both are handed in by the caller.
    """

    def __init__(
        self,
        db: Session,
        image_store: ImageStore,
        delete_image_on_remove: bool = False,
    ):
        self.db = db
        self.image_store = image_store
        self.delete_image_on_remove = delete_image_on_remove

    def list_students(self) -> list[Student]:
        """List all students in insertion order."""
        result = self.db.execute(select(Student).order_by(Student.id))
        return list(result.scalars().all())

    def get_student(self, student_id: int) -> Student | None:
        """Get student by ID, or None if there is no such student."""
        return self.db.get(Student, student_id)

    def create_student(self, request: StudentCreate) -> Student:
        """Create a new student. The id is assigned by the database."""
        student = Student(name=request.name, email=request.email)
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        logger.info(f"Created student {student.id} ({student.name})")
        return student

    def create_student_with_image(
        self,
        name: str,
        email: str,
        image: bytes | None = None,
    ) -> Student:
        """
        Create a student and attach an optional profile image.

        The image filename embeds the student id, so the record is inserted
        first and the image attached afterwards. A failed file write removes
        the new record again; a failed record update removes the written file.
        """
        student = self.create_student(StudentCreate(name=name, email=email))
        if image is None:
            return student

        filename = image_filename(student.id, student.name)
        try:
            self.image_store.write(filename, image)
        except Exception:
            logger.warning(f"Image write failed for student {student.id}, removing record")
            self.db.delete(student)
            self.db.flush()
            raise

        try:
            student.image_name = filename
            self.db.flush()
            self.db.refresh(student)
        except Exception:
            logger.warning(f"Attaching image to student {student.id} failed, removing {filename}")
            self.image_store.delete(filename)
            raise

        logger.info(f"Attached image {filename} to student {student.id}")
        return student

    def get_student_image(self, student_id: int) -> bytes:
        """Return the raw JPEG bytes of a student's profile image."""
        student = self.get_student(student_id)
        if student is None:
            raise NotFoundError("Student", str(student_id))

        # A stored image name wins over the conventional one, which goes stale on rename
        filename = student.image_name or image_filename(student.id, student.name)
        if not is_valid_filename(filename):
            # Names written outside the API may not form a usable file name
            raise StorageError(f"No readable image for student {student_id}", filename)
        return self.image_store.read(filename)

    def update_student(self, student_id: int, request: StudentUpdate) -> Student | None:
        """Replace every field of a student with the given payload."""
        student = self.get_student(student_id)
        if student is None:
            return None

        if request.id is not None and request.id != student_id:
            raise ValidationError(
                "Payload id does not match the student being updated",
                details={"path_id": student_id, "payload_id": request.id},
            )
        if request.image_name is not None and not self.image_store.exists(request.image_name):
            raise ValidationError(
                "Image file does not exist",
                details={"image_name": request.image_name},
            )

        student.name = request.name
        student.email = request.email
        student.image_name = request.image_name
        self.db.flush()
        self.db.refresh(student)
        logger.info(f"Updated student {student.id}")
        return student

    def delete_student(self, student_id: int) -> Student | None:
        """Delete a student and return the removed record."""
        student = self.get_student(student_id)
        if student is None:
            return None

        self.db.delete(student)
        self.db.flush()
        logger.info(f"Deleted student {student_id}")

        if self.delete_image_on_remove and student.image_name:
            self.image_store.delete(student.image_name)
        return student
