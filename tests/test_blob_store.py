import pytest
from app.core.errors import UploadRejected
from app.services.blob_store import (
    CHUNK_SIZE, BlobStore, content_image_path, delivery_file_path, safe_filename, validate_file, validate_image,
)

MB = 1024 * 1024

# ========== TEST VALIDATION ==========

def test_validate_image_limits():
    validate_image("image/png", 5 * MB)
    with pytest.raises(UploadRejected):
        validate_image("image/png", 5 * MB + 1)
    with pytest.raises(UploadRejected):
        validate_image("application/pdf", 10)
    with pytest.raises(UploadRejected):
        validate_image(None, 10)

def test_validate_file_limit():
    validate_file(50 * MB)
    with pytest.raises(UploadRejected):
        validate_file(50 * MB + 1)

def test_storage_paths():
    assert content_image_path(3, "my photo.png").startswith("users/3/content-images/")
    assert content_image_path(3, "my photo.png").endswith("_my_photo.png")
    assert delivery_file_path(3, "p1", "guide.pdf").startswith("users/3/delivery-files/p1/")
    assert safe_filename("../../etc/passwd") == "passwd"

# ========== TEST UPLOAD ==========

def test_upload_reports_progress_in_chunks(tmp_path):
    store = BlobStore(root=str(tmp_path), base_url="http://cdn.test/")
    data = b"x" * (CHUNK_SIZE * 2 + 10)
    progress = []

    url = store.upload("users/1/content-images/1_a.png", data, lambda done, total: progress.append(done))

    assert url == "http://cdn.test/uploads/users/1/content-images/1_a.png"
    assert progress == [CHUNK_SIZE, CHUNK_SIZE * 2, len(data)]
    assert (tmp_path / "users/1/content-images/1_a.png").read_bytes() == data

def test_upload_outside_root_rejected(tmp_path):
    store = BlobStore(root=str(tmp_path / "uploads"), base_url="http://cdn.test")
    with pytest.raises(UploadRejected):
        store.upload("../escape.txt", b"x")

def test_delete(tmp_path):
    store = BlobStore(root=str(tmp_path), base_url="http://cdn.test")
    url = store.upload("users/1/f.txt", b"x")

    assert store.path_from_url(url) == "users/1/f.txt"
    assert store.delete("users/1/f.txt") is True
    assert store.delete("users/1/f.txt") is False
