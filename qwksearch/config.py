"""Application configuration objects based on Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, EmailStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .search.constants import PUBLIC_INSTANCES


class FastAPISettings(BaseModel):
    """Settings that control FastAPI specific behaviour."""

    title: str = "QwkSearch"
    description: str = "Chat with a language model augmented by live web search."
    version: str = "0.1.0"
    docs_url: str | None = "/docs"
    redoc_url: str | None = "/redoc"
    openapi_url: str = "/openapi.json"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: list[str] = Field(default_factory=lambda: ["*"])
    gzip_minimum_size: int = 1024
    secret_key: str = Field(default="change-me", description="JWT signing secret")
    access_token_expire_minutes: int = 60 * 24


class PostgresSettings(BaseModel):
    """PostgreSQL connection settings."""

    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = "postgres"
    database: str = "qwksearch"
    echo: bool = False

    @property
    def dsn(self) -> str:
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


class LLMSettings(BaseModel):
    """Chat model providers reachable through ``ModelRegistry``."""

    enabled_providers: list[str] = Field(default_factory=lambda: ["ollama", "vllm"])
    ollama_host: str = "http://localhost:11434"
    vllm_host: str = "http://localhost:8000"
    vllm_api_key: str | None = None
    request_timeout: int = 60
    temperature: float = 0.7


class SearchSettings(BaseModel):
    """Metasearch backends and the retry policy applied across them."""

    private_instance: str = "https://search.qwksearch.com"
    public_instances: list[str] = Field(default_factory=lambda: list(PUBLIC_INSTANCES))
    retry_budget: int = 6
    request_timeout: float = 10.0
    non_repeating_sampling: bool = False
    proxy: str | None = None
    max_results: int = 10


class ChatSettings(BaseModel):
    """Behaviour of the streaming answer pipeline."""

    title_max_length: int = 60
    suggestions_enabled: bool = True
    max_context_results: int = 10
    file_context_chars: int = 4000


class StorageSettings(BaseModel):
    """File-system locations shared with the upload collaborator."""

    upload_dir: Path = Path("storage/uploads")


class BootstrapSettings(BaseModel):
    """Optional account created by ``scripts/seed_database.py``."""

    email: EmailStr = "demo@example.com"
    password: str = "ChangeMe123!"
    full_name: str = "Demo User"


class Settings(BaseSettings):
    """Aggregate settings for the application."""

    fastapi: FastAPISettings = Field(default_factory=FastAPISettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    bootstrap: BootstrapSettings = Field(default_factory=BootstrapSettings)

    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__", case_sensitive=False)

    def sqlalchemy_database_uri(self) -> str:
        """Return SQLAlchemy DSN."""

        return self.postgres.dsn


@lru_cache()
def load_settings() -> Settings:
    """Load application settings with caching."""

    return Settings()


__all__ = [
    "Settings",
    "FastAPISettings",
    "PostgresSettings",
    "LLMSettings",
    "SearchSettings",
    "ChatSettings",
    "StorageSettings",
    "BootstrapSettings",
    "load_settings",
]
