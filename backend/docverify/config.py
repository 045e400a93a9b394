from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "DocVerify"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    # Upload metadata limits. File content itself lives in external storage;
    # only the declared type and size are checked here.
    max_upload_bytes: int = 2 * 1024 * 1024  # 2 MiB
    allowed_mime_types: set[str] = {"application/pdf", "image/png", "image/jpeg"}
    default_page_size: int = 20
    max_page_size: int = 100
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db.sqlite"

    model_config = {"env_prefix": "DOCVERIFY_"}


settings = Settings()
