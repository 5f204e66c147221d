from __future__ import annotations

import io

import pytest

from activity_reports.attachments.model import NewAttachment
from activity_reports.attachments.service import storage_name
from activity_reports.core.enums import Role
from activity_reports.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError


def _upload(service, report_id, uploader_id, name="notes.txt", data=b"hello"):
    return service.store_upload(
        report_id=report_id,
        uploader_id=uploader_id,
        original_filename=name,
        stream=io.BytesIO(data),
        mime_type="text/plain",
    )


def test_store_upload_writes_blob_and_metadata(attachment_service, create_report, blobs, staff):
    report = create_report(staff)

    attachment = _upload(attachment_service, report.id, staff.id, name="../../etc/passwd")

    assert attachment.file_size == 5
    assert attachment.original_filename == "../../etc/passwd"
    assert attachment.file_path.startswith(f"reports/{report.id}/")
    assert ".." not in attachment.filename
    assert blobs.files[attachment.file_path] == b"hello"


def test_storage_names_are_unique():
    assert storage_name("a b.pdf") != storage_name("a b.pdf")
    assert storage_name("a b.pdf").endswith("_a_b.pdf")


def test_only_creator_may_upload(attachment_service, create_report, blobs, staff, admin):
    report = create_report(staff)

    with pytest.raises(PermissionDeniedError):
        _upload(attachment_service, report.id, admin.id)
    assert not blobs.files


def test_upload_to_missing_report(attachment_service, staff):
    with pytest.raises(NotFoundError):
        _upload(attachment_service, 999, staff.id)


def test_empty_upload_is_rejected_and_blob_removed(attachment_service, create_report, blobs, staff):
    report = create_report(staff)

    with pytest.raises(ValidationError):
        _upload(attachment_service, report.id, staff.id, data=b"")
    assert not blobs.files


def test_upload_metadata_validation(attachment_service, create_report, staff):
    report = create_report(staff)
    data = NewAttachment(
        report_id=report.id,
        filename="f.txt",
        original_filename="f.txt",
        file_path="reports/x/f.txt",
        file_size=0,
        mime_type="text/plain",
    )
    with pytest.raises(ValidationError):
        attachment_service.upload(data, staff.id)


def test_list_and_open_respect_visibility(attachment_service, create_report, staff, other_staff, pimpinan):
    report = create_report(staff)
    first = _upload(attachment_service, report.id, staff.id, name="a.txt")
    second = _upload(attachment_service, report.id, staff.id, name="b.txt")

    assert [a.id for a in attachment_service.list(report.id, pimpinan.id, Role.PIMPINAN)] == [first.id, second.id]
    with pytest.raises(PermissionDeniedError):
        attachment_service.list(report.id, other_staff.id, Role.STAFF)
    with pytest.raises(NotFoundError):
        attachment_service.list(999, staff.id, Role.STAFF)

    found = attachment_service.open(first.id, staff.id, Role.STAFF)
    assert found is not None
    assert found[1].read() == b"hello"
    assert attachment_service.open(first.id, other_staff.id, Role.STAFF) is None
    assert attachment_service.open(999, staff.id, Role.STAFF) is None


def test_delete_attachment(attachment_service, create_report, db, blobs, staff, other_staff, admin):
    report = create_report(staff)
    mine = _upload(attachment_service, report.id, staff.id, name="a.txt")
    second = _upload(attachment_service, report.id, staff.id, name="b.txt")

    assert attachment_service.delete(mine.id, other_staff.id, Role.STAFF) is False
    assert attachment_service.delete(mine.id, staff.id, Role.STAFF) is True
    assert mine.file_path not in blobs.files

    blobs.fail_on_delete = True
    assert attachment_service.delete(second.id, admin.id, Role.ADMIN) is True
    assert not db.attachments
    assert attachment_service.delete(second.id, admin.id, Role.ADMIN) is False


def test_original_filename_is_stored_as_given(attachment_service, create_report, staff):
    report = create_report(staff)

    attachment = _upload(attachment_service, report.id, staff.id, name="  notes .txt ")

    assert attachment.original_filename == "  notes .txt "
    assert attachment_service.list(report.id, staff.id, Role.STAFF)[0].original_filename == "  notes .txt "


@pytest.mark.parametrize("name", ["   ", "", None])
def test_blank_original_filename_is_rejected(attachment_service, create_report, blobs, staff, name):
    report = create_report(staff)

    with pytest.raises(ValidationError):
        _upload(attachment_service, report.id, staff.id, name=name)
    assert not blobs.files
