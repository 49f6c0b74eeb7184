"""Student schemas."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from institute_api.schemas.common import BaseSchema

# Leaves room for "{id}_" and ".jpg" within a 255-byte file name
NAME_MAX_BYTES = 200


class StudentBase(BaseSchema):
    """Base student schema."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)


class StudentInput(StudentBase):
    """Student payload accepted from clients."""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names end up in image file names, so they must be usable as one."""
        if any(c in v for c in ("/", "\\", "\x00")):
            raise ValueError("Name must not contain '/', '\\' or NUL characters")
        if len(v.encode("utf-8")) > NAME_MAX_BYTES:
            raise ValueError(f"Name must be at most {NAME_MAX_BYTES} bytes in UTF-8")
        return v


class StudentCreate(StudentInput):
    """Student creation schema.

    Clients may send back a full record; ``id`` and ``image_name`` are
    accepted but ignored, the store assigns the id.
    """

    id: int | None = None
    image_name: str | None = Field(None, max_length=512)


class StudentUpdate(StudentInput):
    """Student update schema.

    Updates replace the whole record, so any field left out is cleared.
    """

    id: int | None = None
    image_name: str | None = Field(None, max_length=512)


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    image_name: str | None = None
    created_at: datetime
    updated_at: datetime
