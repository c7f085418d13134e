from app.config import settings
from app.routes import upload
from tests.utils import auth_headers


class FakeS3:
    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?op={operation}&ttl={ExpiresIn}"


def test_upload_not_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "AWS_BUCKET_NAME", "")
    r = client.post(
        "/upload/presigned-url/image",
        json={"filename": "logo.png", "content_type": "image/png"},
        headers=auth_headers("mia@club.io"),
    )
    assert r.status_code == 503


def test_presigned_image_url(client, monkeypatch):
    monkeypatch.setattr(settings, "AWS_BUCKET_NAME", "clubsphere-media")
    monkeypatch.setattr(upload, "get_s3_client", lambda: FakeS3())
    headers = auth_headers("mia@club.io")

    r = client.post(
        "/upload/presigned-url/image",
        json={"filename": "logo.png", "content_type": "image/png"},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["file_key"].startswith("images/") and body["file_key"].endswith(".png")
    assert body["public_url"].endswith(body["file_key"])
    assert body["expires_in"] == 900

    r = client.post(
        "/upload/presigned-url/image",
        json={"filename": "notes.pdf", "content_type": "application/pdf"},
        headers=headers,
    )
    assert r.status_code == 400
