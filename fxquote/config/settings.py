from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BucketGranularity(str, Enum):
    DAY = "day"
    MINUTE = "minute"


class Settings(BaseSettings):
    app_name: str = "FX Quote Gateway"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    upstream_url: str = "http://localhost:8181/mock"
    upstream_token: str = ""

    request_timeout_ms: int = Field(default=200, gt=0)
    database_timeout_ms: int = Field(default=50, gt=0)
    database_url: str = "sqlite:///./app.db"
    bucket_granularity: BucketGranularity = BucketGranularity.DAY

    client_server_url: str = "http://localhost:8080/cotacao"
    client_timeout_ms: int = Field(default=300, gt=0)
    client_output_path: str = "cotacao.txt"

    mock_host: str = "0.0.0.0"
    mock_port: int = 8181
    mock_delay_ms: int = Field(default=500, ge=0)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def database_timeout_seconds(self) -> float:
        return self.database_timeout_ms / 1000


settings = Settings()
