import pytest
from pydantic import ValidationError as PydanticValidationError

from institute_api.core.exceptions import NotFoundError, StorageError, ValidationError
from institute_api.models.student import Student
from institute_api.schemas.student import NAME_MAX_BYTES, StudentCreate, StudentUpdate
from institute_api.services.image_store import ImageStore
from institute_api.services.student import StudentService

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9"


class FailingImageStore(ImageStore):
    def write(self, filename, data):
        raise StorageError(f"Could not write image '{filename}'", filename)


def test_create_then_get(service):
    created = service.create_student(StudentCreate(name="Ann", email="a@x.com"))

    found = service.get_student(created.id)
    assert found is not None
    assert found.name == "Ann"
    assert found.email == "a@x.com"
    assert found.image_name is None


def test_create_ignores_client_id_and_image_name(service):
    created = service.create_student(
        StudentCreate(id=999, name="Ann", email="a@x.com", image_name="999_Ann.jpg")
    )

    assert created.id != 999
    assert created.image_name is None


def test_get_missing_student_returns_none(service):
    assert service.get_student(12345) is None


def test_list_returns_students_in_insertion_order(service):
    names = ["Ann", "Bob", "Carl", "Dora"]
    for name in names:
        service.create_student(StudentCreate(name=name, email=f"{name.lower()}@x.com"))

    students = service.list_students()
    assert [s.name for s in students] == names


def test_create_with_image_attaches_file(service, image_store):
    student = service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)

    assert student.image_name == f"{student.id}_Bob.jpg"
    assert image_store.read(student.image_name) == JPEG_BYTES
    assert service.get_student_image(student.id) == JPEG_BYTES


def test_create_with_image_without_image(service):
    student = service.create_student_with_image("Bob", "b@x.com")

    assert student.image_name is None
    with pytest.raises(StorageError):
        service.get_student_image(student.id)


def test_create_with_image_removes_record_when_write_fails(db, tmp_path):
    service = StudentService(db, FailingImageStore(tmp_path))

    with pytest.raises(StorageError):
        service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)

    assert db.query(Student).count() == 0


def test_create_with_image_removes_file_when_attach_fails(db, image_store, monkeypatch):
    service = StudentService(db, image_store)
    original_flush = db.flush
    calls = {"count": 0}

    def flaky_flush(*args, **kwargs):
        calls["count"] += 1
        # First flush inserts the record, second one attaches the image
        if calls["count"] == 2:
            raise RuntimeError("database went away")
        return original_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", flaky_flush)

    with pytest.raises(RuntimeError):
        service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)

    assert list(image_store.directory.iterdir()) == []


def test_get_image_for_unknown_student_raises_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.get_student_image(4242)

    assert exc_info.value.status_code == 404
    assert "4242" in exc_info.value.message


def test_get_image_uses_stored_name_after_rename(service):
    student = service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)
    original_image = student.image_name

    service.update_student(
        student.id,
        StudentUpdate(name="Robert", email="b@x.com", image_name=original_image),
    )

    assert service.get_student(student.id).image_name == original_image
    assert service.get_student_image(student.id) == JPEG_BYTES


def test_update_replaces_every_field(service):
    student = service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)

    updated = service.update_student(student.id, StudentUpdate(name="Carl", email="c@x.com"))

    assert updated.id == student.id
    assert updated.name == "Carl"
    assert updated.email == "c@x.com"
    assert updated.image_name is None


def test_update_missing_student_returns_none(service):
    assert service.update_student(5, StudentUpdate(name="Carl", email="c@x.com")) is None


def test_update_rejects_mismatched_payload_id(service):
    student = service.create_student(StudentCreate(name="Ann", email="a@x.com"))

    with pytest.raises(ValidationError):
        service.update_student(
            student.id, StudentUpdate(id=student.id + 1, name="Ann", email="a@x.com")
        )


def test_update_rejects_unknown_image_name(service):
    student = service.create_student(StudentCreate(name="Ann", email="a@x.com"))

    with pytest.raises(ValidationError):
        service.update_student(
            student.id,
            StudentUpdate(name="Ann", email="a@x.com", image_name="missing.jpg"),
        )


def test_delete_returns_record_and_keeps_image(service, image_store):
    student = service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)
    image_name = student.image_name

    removed = service.delete_student(student.id)

    assert removed.id == student.id
    assert removed.name == "Bob"
    assert service.get_student(student.id) is None
    assert image_store.exists(image_name)


def test_delete_can_remove_image(db, image_store):
    service = StudentService(db, image_store, delete_image_on_remove=True)
    student = service.create_student_with_image("Bob", "b@x.com", JPEG_BYTES)
    image_name = student.image_name

    service.delete_student(student.id)

    assert not image_store.exists(image_name)


def test_delete_missing_student_returns_none(service):
    assert service.delete_student(77) is None


@pytest.mark.parametrize("name", ["a/b", "a\\b", "a\x00b", "x" * 201, "é" * 101])
def test_schema_rejects_names_unusable_in_image_filenames(name):
    with pytest.raises(PydanticValidationError):
        StudentCreate(name=name, email="a@x.com")
    with pytest.raises(PydanticValidationError):
        StudentUpdate(name=name, email="a@x.com")


def test_longest_allowed_name_fits_an_image_filename(service, image_store):
    student = service.create_student_with_image("x" * NAME_MAX_BYTES, "a@x.com", JPEG_BYTES)

    assert image_store.read(student.image_name) == JPEG_BYTES


@pytest.mark.parametrize("name", ["a/b", "a\x00b"])
def test_get_image_for_name_without_valid_filename_is_storage_error(db, service, name):
    student = Student(name=name, email="a@x.com")
    db.add(student)
    db.flush()

    with pytest.raises(StorageError):
        service.get_student_image(student.id)


def test_update_missing_student_ignores_payload_checks(service):
    assert service.update_student(5, StudentUpdate(id=6, name="Carl", email="c@x.com")) is None
    assert (
        service.update_student(
            5, StudentUpdate(name="Carl", email="c@x.com", image_name="missing.jpg")
        )
        is None
    )
