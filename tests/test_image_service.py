"""Tests for the single-image replace-on-upload policy."""

from __future__ import annotations

from io import BytesIO

import pytest
from sqlalchemy.exc import OperationalError
from werkzeug.datastructures import FileStorage

from conftest import create_user
from models import db
from models.user_image import UserImage
from services.errors import Internal, InvalidInput, NotFound
from storage import StorageError


def _file(data: bytes, content_type: str = "image/png", filename: str = "pic.png") -> FileStorage:
    return FileStorage(stream=BytesIO(data), filename=filename, content_type=content_type)


def _key(view: dict) -> str:
    return view["url"].split("/", 1)[1]


@pytest.fixture()
def owner(services):
    return create_user("owner@example.com", verified=True)


def test_upload_stores_object_and_metadata(services, owner):
    view = services.images.upload_image(_file(b"abc"), owner)

    key = _key(view)
    assert key.startswith(f"users/{owner.id}/")
    assert key.endswith(".png")
    assert view["file_name"] == key.rsplit("/", 1)[1]
    assert view["user_id"] == str(owner.id)
    assert services.storage.exists(key)
    with services.storage.open(key) as handle:
        assert handle.read() == b"abc"

    image = UserImage.query.filter_by(user_id=owner.id).one()
    assert image.size == 3
    assert image.content_type == "image/png"
    assert services.metrics.count("webapp.image.uploads") == 1


def test_get_image_returns_stored_view(services, owner):
    uploaded = services.images.upload_image(_file(b"abc"), owner)

    assert services.images.get_image(owner.id) == uploaded


def test_get_image_without_upload_is_not_found(services, owner):
    with pytest.raises(NotFound):
        services.images.get_image(owner.id)


def test_upload_rejects_empty_file(services, owner):
    with pytest.raises(InvalidInput):
        services.images.upload_image(_file(b""), owner)


@pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", "text/plain"])
def test_upload_rejects_disallowed_types(services, owner, content_type):
    with pytest.raises(InvalidInput):
        services.images.upload_image(_file(b"abc", content_type, "pic.gif"), owner)

    assert UserImage.query.count() == 0


@pytest.mark.parametrize("content_type, suffix", [("image/jpeg", ".jpg"), ("image/jpg", ".jpg")])
def test_extension_falls_back_to_content_type(services, owner, content_type, suffix):
    view = services.images.upload_image(_file(b"abc", content_type, "no-extension"), owner)

    assert view["file_name"].endswith(suffix)


def test_upload_rejects_same_size_and_type(services, owner):
    first = services.images.upload_image(_file(b"abc"), owner)

    with pytest.raises(InvalidInput):
        services.images.upload_image(_file(b"xyz"), owner)

    assert services.images.get_image(owner.id) == first


def test_same_size_different_type_replaces(services, owner):
    first = services.images.upload_image(_file(b"abc"), owner)

    second = services.images.upload_image(_file(b"abc", "image/jpeg", "pic.jpg"), owner)

    assert second["id"] != first["id"]
    assert UserImage.query.filter_by(user_id=owner.id).count() == 1


def test_replacement_scenario(services, owner):
    first = services.images.upload_image(_file(b"abc"), owner)
    assert services.images.get_image(owner.id)["url"] == first["url"]

    second = services.images.upload_image(_file(b"abcd"), owner)

    assert second["url"] != first["url"]
    assert not services.storage.exists(_key(first))
    assert services.storage.exists(_key(second))
    assert services.images.get_image(owner.id)["url"] == second["url"]
    assert UserImage.query.filter_by(user_id=owner.id).count() == 1

    services.images.delete_image(owner.id)

    assert not services.storage.exists(_key(second))
    with pytest.raises(NotFound):
        services.images.get_image(owner.id)


def test_delete_without_image_is_not_found(services, owner):
    with pytest.raises(NotFound):
        services.images.delete_image(owner.id)


def test_images_are_isolated_per_user(services, owner):
    other = create_user("other@example.com", verified=True)

    services.images.upload_image(_file(b"abc"), owner)
    services.images.upload_image(_file(b"abc"), other)

    assert UserImage.query.count() == 2
    services.images.delete_image(owner.id)
    assert services.images.get_image(other.id)["user_id"] == str(other.id)


def test_storage_write_failure_is_internal(services, owner, monkeypatch):
    def _fail(*args, **kwargs):
        raise StorageError("bucket unavailable")

    monkeypatch.setattr(services.storage, "put", _fail)

    with pytest.raises(Internal):
        services.images.upload_image(_file(b"abc"), owner)

    assert UserImage.query.count() == 0


def test_metadata_failure_removes_new_object(services, owner, monkeypatch, tmp_path):
    first = services.images.upload_image(_file(b"abc"), owner)

    def _fail():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", _fail)

    with pytest.raises(Internal):
        services.images.upload_image(_file(b"abcd"), owner)

    monkeypatch.undo()
    stored = sorted(p.name for p in (tmp_path / "uploads" / "users" / str(owner.id)).iterdir())
    assert stored == [first["file_name"]]
    assert services.images.get_image(owner.id) == first


def test_old_object_delete_failure_keeps_new_image(services, owner, monkeypatch):
    first = services.images.upload_image(_file(b"abc"), owner)

    def _fail(key):
        raise StorageError("access denied")

    monkeypatch.setattr(services.storage, "delete", _fail)

    second = services.images.upload_image(_file(b"abcd"), owner)

    assert services.images.get_image(owner.id) == second
    assert services.storage.exists(_key(first))
    assert services.metrics.count("image.orphaned") == 1


def test_delete_metadata_failure_keeps_object(services, owner, monkeypatch):
    view = services.images.upload_image(_file(b"abc"), owner)

    def _fail():
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", _fail)

    with pytest.raises(Internal):
        services.images.delete_image(owner.id)

    monkeypatch.undo()
    assert services.storage.exists(_key(view))
    assert services.images.get_image(owner.id) == view
