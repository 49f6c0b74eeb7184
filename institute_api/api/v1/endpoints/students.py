"""Student management endpoints."""

import logging

from fastapi import APIRouter, File, Form, Response, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from institute_api.core.config import settings
from institute_api.core.dependencies import StudentServiceDep
from institute_api.core.exceptions import NotFoundError, UploadError, ValidationError
from institute_api.schemas.common import ErrorResponse
from institute_api.schemas.student import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_RESPONSE = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


@router.get("", response_model=list[StudentResponse])
def list_students(service: StudentServiceDep):
    """List all students."""
    return [StudentResponse.model_validate(s) for s in service.list_students()]


@router.get("/{student_id}", response_model=StudentResponse, responses=NOT_FOUND_RESPONSE)
def get_student(student_id: int, service: StudentServiceDep):
    """Get a student by ID."""
    student = service.get_student(student_id)
    if student is None:
        raise NotFoundError("Student", str(student_id))
    return StudentResponse.model_validate(student)


@router.get(
    "/{student_id}/getImage",
    response_class=Response,
    responses={
        status.HTTP_200_OK: {"content": {"image/jpeg": {}}},
        **NOT_FOUND_RESPONSE,
    },
)
def get_student_image(student_id: int, service: StudentServiceDep):
    """Get the profile image of a student as JPEG bytes."""
    content = service.get_student_image(student_id)
    return Response(content=content, media_type="image/jpeg")


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
def create_student(request: StudentCreate, service: StudentServiceDep):
    """Create a new student."""
    student = service.create_student(request)
    return StudentResponse.model_validate(student)


@router.post(
    "/withImage",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_student_with_image(
    service: StudentServiceDep,
    name: str = Form(...),
    email: str = Form(...),
    image: UploadFile | None = File(None),
):
    """
    Create a student from form fields, with an optional profile image.

    - The image is stored as ``{id}_{name}.jpg`` once the id is assigned
    - Requires multipart/form-data
    """
    # Reuse the JSON payload validation for the form fields
    try:
        payload = StudentCreate(name=name, email=email)
    except PydanticValidationError as e:
        raise ValidationError(
            "Request validation failed",
            details={"errors": e.errors(include_url=False, include_context=False)},
        )

    content = None
    if image is not None:
        content = image.file.read()
        if len(content) > settings.max_upload_size_bytes:
            raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")
        logger.debug(f"Received image {image.filename} ({len(content)} bytes)")

    student = service.create_student_with_image(payload.name, payload.email, content)
    return StudentResponse.model_validate(student)


@router.put("/{student_id}", response_model=StudentResponse, responses=NOT_FOUND_RESPONSE)
def update_student(student_id: int, request: StudentUpdate, service: StudentServiceDep):
    """Replace a student's fields with the given payload."""
    student = service.update_student(student_id, request)
    if student is None:
        raise NotFoundError("Student", str(student_id))
    return StudentResponse.model_validate(student)


@router.delete("/{student_id}", response_model=StudentResponse, responses=NOT_FOUND_RESPONSE)
def delete_student(student_id: int, service: StudentServiceDep):
    """Delete a student and return the removed record."""
    student = service.delete_student(student_id)
    if student is None:
        raise NotFoundError("Student", str(student_id))
    return StudentResponse.model_validate(student)
