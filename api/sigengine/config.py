import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./signatures.db")
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "minio:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "signing")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
WORKER_QUEUE = os.getenv("WORKER_QUEUE", "signing")
ARCHIVE_SIGNED = os.getenv("ARCHIVE_SIGNED", "0").lower() in ("1", "true", "yes")
# strftime pattern for date fields; unset means en-US M/D/YYYY
DATE_FORMAT = os.getenv("DATE_FORMAT")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
