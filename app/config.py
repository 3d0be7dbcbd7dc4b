from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./app.db"

    # Admin login: single shared password (empty = login disabled)
    admin_password: str = ""
    # Session lifetime in minutes (0 = until logout or process restart)
    session_ttl_minutes: int = 0

    # Redis (optional session store; empty = in-memory sessions)
    redis_url: str = ""  # e.g. redis://localhost:6379/0

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:5173"

    # Video upload ceiling in megabytes
    max_upload_mb: int = 100

    # Local blob storage (used when s3_bucket is empty)
    upload_dir: str = ""  # empty = backend/uploads
    public_base_url: str = ""  # empty = /uploads

    # S3-compatible blob storage (R2, MinIO, B2...)
    s3_bucket: str = ""
    s3_endpoint_url: str = ""
    s3_region: str = "auto"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_public_url: str = ""  # public base for object URLs, e.g. https://pub-xxx.r2.dev

    # Token gate
    chain_rpc_url: str = "https://mainnet.base.org"
    chain_id: int = 8453
    chain_name: str = "Base"
    chain_explorer_url: str = "https://basescan.org"
    token_address: str = ""
    required_balance: float = 10000
    chain_timeout_seconds: float = 10.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()
