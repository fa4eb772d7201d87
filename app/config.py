import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _resolve_database_url() -> str:
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    environment = os.getenv("ENVIRONMENT", "").strip().lower()
    if environment == "development":
        return "postgresql+psycopg://localhost:5432/neopdf"

    raise ValueError(
        "DATABASE_URL is not set. Set DATABASE_URL for non-development "
        "environments or set ENVIRONMENT=development for local defaults."
    )


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = _resolve_database_url()
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "5"))
    db_max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    db_pool_recycle: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Identity is issued upstream; the gateway forwards the user id in a header
    identity_header: str = os.getenv("IDENTITY_HEADER", "X-User-Id")

    # Upload settings
    upload_max_size_bytes: int = int(
        os.getenv("UPLOAD_MAX_SIZE_BYTES", str(10 * 1024 * 1024))
    )  # 10MB
    upload_allowed_types: str = os.getenv("UPLOAD_ALLOWED_TYPES", "application/pdf")
    dedup_scope: str = os.getenv("DEDUP_SCOPE", "global").strip().lower()
    record_duplicate_uploads: bool = _env_bool("RECORD_DUPLICATE_UPLOADS", "true")

    # Analytics
    storage_limit_bytes: int = int(
        os.getenv("STORAGE_LIMIT_BYTES", str(1024 * 1024 * 1024))
    )  # 1GB
    recent_activity_limit: int = int(os.getenv("RECENT_ACTIVITY_LIMIT", "10"))

    # S3 / MinIO settings
    s3_endpoint_url: str = os.getenv("S3_ENDPOINT_URL", "")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "neopdf-documents")
    s3_region: str = os.getenv("S3_REGION", "us-east-1")

    # Filesystem object store, used when S3 is not configured
    local_storage_dir: str = os.getenv("LOCAL_STORAGE_DIR", "uploads")
    local_storage_url_prefix: str = os.getenv("LOCAL_STORAGE_URL_PREFIX", "/uploads")
    orphan_grace_seconds: int = int(os.getenv("ORPHAN_GRACE_SECONDS", "3600"))

    # Celery
    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    celery_result_backend: str = os.getenv(
        "CELERY_RESULT_BACKEND", "redis://localhost:6379/1"
    )

    # OpenTelemetry
    otel_enabled: bool = _env_bool("OTEL_ENABLED", "false")
    otel_service_name: str = os.getenv("OTEL_SERVICE_NAME", "neopdf-api")
    otel_exporter_otlp_endpoint: str = os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces"
    )


settings = Settings()
