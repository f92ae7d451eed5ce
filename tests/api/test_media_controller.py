"""
API tests for blobs served from the local object store.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import settings
from app.core.dependencies import get_db, get_storage
from app.main import app
from app.storage.local import LocalObjectStore
from models import FileRecord, Submission, SubmissionStatus

MEDIA = settings.local_storage_url_prefix


@pytest.fixture
def local_store(tmp_path):
    return LocalObjectStore(
        root=tmp_path, url_prefix=MEDIA, signing_key=settings.secret_key
    )


@pytest_asyncio.fixture
async def media_client(test_db, local_store, auth_headers):
    """Admin client whose object store writes to a temporary directory."""
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_storage] = lambda: local_store
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=auth_headers
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def local_file(test_db, local_store, admin_principal, pdf_bytes):
    key = "uploads/1700000000010-eeeeeeeeeeeeeeee.pdf"
    await local_store.put(key, pdf_bytes, "application/pdf")
    record = FileRecord(
        owner_id=admin_principal.id,
        storage_key=key,
        display_name="handout.pdf",
        public_url=local_store.public_url(key),
        size_bytes=len(pdf_bytes),
        mime_type="application/pdf",
    )
    test_db.add(record)
    await test_db.commit()
    await test_db.refresh(record)
    return record


@pytest_asyncio.fixture
async def local_submission(test_db, local_store, pdf_bytes):
    key = "submissions/1700000000011-ffffffffffffffff.pdf"
    await local_store.put(key, pdf_bytes, "application/pdf")
    submission = Submission(
        student_name="Ana Student",
        student_email="ana@example.com",
        storage_key=key,
        display_name="essay.pdf",
        public_url=local_store.public_url(key),
        size_bytes=len(pdf_bytes),
        mime_type="application/pdf",
        category="essays",
        status=SubmissionStatus.pending,
    )
    test_db.add(submission)
    await test_db.commit()
    await test_db.refresh(submission)
    return submission


class TestPublishedFiles:
    """Published file blobs are public."""

    @pytest.mark.asyncio
    async def test_serves_without_token(self, media_client, local_file, pdf_bytes):
        response = await media_client.get(local_file.public_url)

        assert response.status_code == 200
        assert response.content == pdf_bytes
        assert "handout.pdf" in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_download_redirect_is_followed(self, media_client, local_file, pdf_bytes):
        redirect = await media_client.get(f"/api/files/download/{local_file.id}")
        assert redirect.status_code == 307

        response = await media_client.get(redirect.headers["location"])

        assert response.status_code == 200
        assert response.content == pdf_bytes

    @pytest.mark.asyncio
    async def test_blob_gone(self, media_client, local_store, local_file):
        local_store.path_for(local_file.storage_key).unlink()

        response = await media_client.get(local_file.public_url)

        assert response.status_code == 404
        assert response.json()["error_code"] == "BLOB_NOT_FOUND"


class TestSubmissionBlobs:
    """Blobs awaiting review need a signed download token."""

    @pytest.mark.asyncio
    async def test_pending_blob_is_not_public(self, media_client, local_submission):
        response = await media_client.get(local_submission.public_url)

        assert response.status_code == 404
        assert response.json()["error_code"] == "FILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_signed_redirect_serves_blob(self, media_client, local_submission, pdf_bytes):
        redirect = await media_client.get(f"/api/submissions/download/{local_submission.id}")
        assert redirect.status_code == 307

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as anonymous:
            response = await anonymous.get(redirect.headers["location"])

        assert response.status_code == 200
        assert response.content == pdf_bytes
        assert "essay.pdf" in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_token_for_other_key(self, media_client, local_store, local_submission):
        url = await local_store.download_url("submissions/other.pdf")
        token = url.split("?", 1)[1]

        response = await media_client.get(f"{local_submission.public_url}?{token}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_expired_token(self, media_client, local_store, local_submission):
        local_store.signed_url_expiration = -30
        url = await local_store.download_url(local_submission.storage_key)

        response = await media_client.get(url)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_key_outside_root(self, media_client):
        response = await media_client.get(f"{MEDIA}/..%2F..%2Fetc%2Fpasswd")

        assert response.status_code == 404
