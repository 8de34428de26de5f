import boto3
import pytest
from botocore.stub import Stubber

from payhub_backend.config import settings
from payhub_backend.core.exceptions import ExternalServiceError
from payhub_backend.modules.documents.storage import (
    LocalStorageClient,
    S3StorageClient,
    build_storage_client,
)


@pytest.fixture
def s3():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


async def test_local_storage_round_trip(tmp_path):
    storage = LocalStorageClient(tmp_path)

    await storage.save("tenants/1/documents/a.png", b"png", "image/png")
    url = await storage.download_url("tenants/1/documents/a.png", "a.png")
    await storage.delete("tenants/1/documents/a.png")

    assert url == (tmp_path / "tenants/1/documents/a.png").resolve().as_uri()
    assert not (tmp_path / "tenants/1/documents/a.png").exists()


async def test_local_storage_refuses_escaping_keys(tmp_path):
    storage = LocalStorageClient(tmp_path / "root")

    with pytest.raises(ValueError):
        await storage.save("../outside.png", b"png", None)


async def test_s3_save_puts_object(s3):
    storage = S3StorageClient("payhub-documents", client=s3)

    with Stubber(s3) as stubber:
        stubber.add_response(
            "put_object",
            {},
            {
                "Bucket": "payhub-documents",
                "Key": "tenants/1/documents/a.png",
                "Body": b"png",
                "ContentType": "image/png",
            },
        )
        await storage.save("tenants/1/documents/a.png", b"png", "image/png")
        stubber.assert_no_pending_responses()


async def test_s3_failure_is_a_service_error(s3):
    storage = S3StorageClient("payhub-documents", client=s3)

    with Stubber(s3) as stubber:
        stubber.add_client_error("delete_object", service_error_code="AccessDenied")
        with pytest.raises(ExternalServiceError) as exc:
            await storage.delete("tenants/1/documents/a.png")

    assert exc.value.details["key"] == "tenants/1/documents/a.png"


async def test_s3_download_url_is_presigned(s3):
    storage = S3StorageClient("payhub-documents", url_expiry_seconds=60, client=s3)

    url = await storage.download_url("tenants/1/documents/a.png", "passport.png")

    assert "payhub-documents" in url
    assert "tenants/1/documents/a.png" in url
    assert "X-Amz-Expires=60" in url or "Expires=" in url


def test_build_storage_client_requires_bucket_for_s3():
    with pytest.raises(ValueError):
        build_storage_client(settings.model_copy(update={"storage_backend": "s3"}))


def test_build_storage_client_defaults_to_local():
    assert isinstance(build_storage_client(settings), LocalStorageClient)
