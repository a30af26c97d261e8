"""Tests for sandboxed file resolution."""

import os

import pytest

from trackdrop.api.download.services.resolver import looks_like_traversal
from trackdrop.api.uploads.dto.upload import FileRecord
from trackdrop.exceptions import NotFoundError, SandboxViolationError

TRAVERSALS = [
    "../../etc/passwd",
    "..",
    "../secret.txt",
    "a/../../b",
    "/etc/passwd",
    "..\\..\\windows\\win.ini",
    "C:\\Windows\\win.ini",
    "C:secret",
    "%2e%2e%2fetc%2fpasswd",
    "..%2F..%2Fetc%2Fpasswd",
    "%252e%252e%252fetc",
    "name\x00.txt",
]


@pytest.fixture
def upload(make_upload):
    return make_upload("share1", {"a.txt": b"0123456789", "b.txt": b"x" * 20})


def test_resolves_every_file_inside_sandbox(services, files_dir, upload):
    root = os.path.realpath(files_dir)
    for record in upload.files:
        path = services.resolver.resolve(upload.id, record.original_name)
        assert str(path).startswith(root + os.sep)
        assert path.read_bytes()


@pytest.mark.parametrize("name", TRAVERSALS)
def test_traversal_names_are_forbidden(services, upload, name):
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve(upload.id, name)


@pytest.mark.parametrize("upload_id", ["..", "../share1", "%2e%2e", "/tmp"])
def test_traversal_upload_ids_are_forbidden(services, upload, upload_id):
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve(upload_id, "a.txt")


def test_traversal_is_forbidden_even_for_unknown_upload(services):
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve("does-not-exist", "../../etc/passwd")


def test_missing_upload_is_not_found(services):
    with pytest.raises(NotFoundError):
        services.resolver.resolve("does-not-exist", "a.txt")


def test_missing_name_is_not_found(services, upload):
    with pytest.raises(NotFoundError):
        services.resolver.resolve(upload.id, "c.txt")


def test_lookup_is_case_sensitive(services, upload):
    with pytest.raises(NotFoundError):
        services.resolver.resolve(upload.id, "A.TXT")


def test_file_deleted_from_disk_is_not_found(services, files_dir, upload):
    (files_dir / upload.id / upload.files[0].stored_name).unlink()
    with pytest.raises(NotFoundError):
        services.resolver.resolve(upload.id, "a.txt")


def test_stored_name_traversal_is_forbidden(services, store, tmp_path):
    secret = tmp_path / "secret.txt"
    secret.write_text("top secret")
    store.create(
        "evil",
        [FileRecord(original_name="x.txt", stored_name="../../secret.txt", size_bytes=10)],
        10,
    )
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve("evil", "x.txt")


def test_sibling_directory_with_same_prefix_is_forbidden(services, store, files_dir):
    sibling = files_dir.parent / (files_dir.name + "-evil")
    sibling.mkdir()
    (sibling / "loot.txt").write_text("loot")
    store.create(
        "prefix",
        [FileRecord(original_name="loot.txt", stored_name=f"../../{sibling.name}/loot.txt", size_bytes=4)],
        4,
    )
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve("prefix", "loot.txt")


def test_symlink_escaping_sandbox_is_forbidden(services, store, files_dir, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("outside")
    upload_dir = files_dir / "linked"
    upload_dir.mkdir()
    os.symlink(outside, upload_dir / "link.txt")
    store.create(
        "linked",
        [FileRecord(original_name="link.txt", stored_name="link.txt", size_bytes=7)],
        7,
    )
    with pytest.raises(SandboxViolationError):
        services.resolver.resolve("linked", "link.txt")


def test_violation_is_logged_as_security_event(services, upload, caplog):
    with caplog.at_level("WARNING", logger="trackdrop.security"):
        with pytest.raises(SandboxViolationError):
            services.resolver.resolve(upload.id, "../../etc/passwd")
    assert any(r.name == "trackdrop.security" for r in caplog.records)


def test_ordinary_names_are_not_traversal():
    for name in ["a.txt", "report 2024.pdf", "..hidden", "file..txt", "100%.txt", "ñandú.png"]:
        assert not looks_like_traversal(name)
