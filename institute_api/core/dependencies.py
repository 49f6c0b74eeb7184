"""FastAPI dependency injection utilities."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from institute_api.core.config import settings
from institute_api.core.database import DbSession
from institute_api.services.image_store import ImageStore
from institute_api.services.student import StudentService


@lru_cache
def get_image_store() -> ImageStore:
    """Image store rooted at the configured student image directory."""
    return ImageStore(settings.STUDENT_IMAGE_DIR)


def get_student_service(
    db: DbSession,
    image_store: Annotated[ImageStore, Depends(get_image_store)],
) -> StudentService:
    """Build a student service bound to the request's session."""
    return StudentService(
        db,
        image_store,
        delete_image_on_remove=settings.STUDENT_IMAGE_DELETE_ON_REMOVE,
    )


# Type alias for dependency injection
StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
