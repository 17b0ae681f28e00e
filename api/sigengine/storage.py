from minio import Minio
from .config import MINIO_ENDPOINT, MINIO_ACCESS_KEY, MINIO_SECRET_KEY, MINIO_BUCKET
import io

_client = Minio(
    MINIO_ENDPOINT,
    access_key=MINIO_ACCESS_KEY,
    secret_key=MINIO_SECRET_KEY,
    secure=False
)

def document_key(digest: str) -> str:
    return f"documents/{digest}.pdf"

def ensure_bucket():
    if not _client.bucket_exists(MINIO_BUCKET):
        _client.make_bucket(MINIO_BUCKET)

def put_bytes(key: str, data: bytes, content_type: str = "application/octet-stream"):
    ensure_bucket()
    _client.put_object(MINIO_BUCKET, key, io.BytesIO(data), length=len(data), content_type=content_type)

def get_bytes(key: str) -> bytes:
    resp = _client.get_object(MINIO_BUCKET, key)
    try:
        return resp.read()
    finally:
        resp.close()
        resp.release_conn()

def archive_pdfs(original: bytes, original_digest: str, signed: bytes, signed_digest: str) -> str:
    put_bytes(document_key(original_digest), original, content_type="application/pdf")
    key = document_key(signed_digest)
    put_bytes(key, signed, content_type="application/pdf")
    return key
