"""Configuration models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("readlater", description="Database name")
    user: str = Field("readlater", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")


class ExtractionConfig(BaseModel):
    """Content extraction configuration."""

    provider: Literal["firecrawl", "trafilatura"] = Field(
        "firecrawl", description="Extraction backend"
    )
    api_key_env: Optional[str] = Field(
        "FIRECRAWL_API_KEY", description="Environment variable for API key"
    )
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: str = Field("https://api.firecrawl.dev", description="Firecrawl API root")
    timeout: float = Field(60.0, description="Request timeout in seconds", gt=0)
    country: str = Field("US", description="Location country code for scraping")
    languages: List[str] = Field(default_factory=lambda: ["en"], description="Preferred languages")
    only_main_content: bool = Field(True, description="Strip navigation and boilerplate")
    proxy: Optional[str] = Field("auto", description="Firecrawl proxy mode")
    user_agent: str = Field(
        "readlater/0.1 (save-for-later library)",
        description="User agent for local fetching",
    )


class IngestionConfig(BaseModel):
    """Batch ingestion parameters."""

    concurrency: int = Field(1, description="Items processed at once", ge=1, le=16)
    item_timeout: Optional[float] = Field(
        120.0, description="Upper bound for one extraction, in seconds", gt=0
    )
    stale_after_minutes: int = Field(
        60, description="Age after which unresolved items are reconciled", ge=1
    )


class ConfigModel(BaseModel):
    """Main configuration model."""

    owner_id: Optional[str] = Field(None, description="Default owner for CLI imports")
    log_level: str = Field("INFO", description="Logging level")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard logging level names only."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
