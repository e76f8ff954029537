import os
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource


class Settings(BaseSettings):
    """Adapter settings - all configuration in one place"""

    ###################################
    #       GENERAL SETTINGS          #
    ###################################
    debug: bool = Field(default=False, description="Debug mode (DEBUG log level)")

    ###################################
    #            LOGGING              #
    ###################################
    log_file_enabled: bool = Field(
        default=False,
        description="Write JSON logs to a rotating file in addition to the console",
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_name: str = Field(default="qdrant_vectorstore.log")

    ###################################
    #            QDRANT               #
    ###################################
    qdrant_url: Optional[str] = Field(
        default=None,
        description="Qdrant server URL. Required unless a client is passed explicitly.",
    )
    qdrant_api_key: Optional[str] = Field(
        default=None,
        description="Qdrant API key for authentication (optional)",
    )
    qdrant_collection_name: str = Field(
        default="documents",
        description="Collection used by the vector store",
    )
    qdrant_content_payload_key: str = Field(
        default="content",
        description="Payload key holding the document text",
    )
    qdrant_metadata_payload_key: str = Field(
        default="metadata",
        description="Payload key holding the document metadata",
    )

    ###################################
    #        VECTOR STORE             #
    ###################################
    vector_distance: Literal["cosine", "euclidean", "dot"] = Field(
        default="cosine",
        description="Distance metric used when the collection is created implicitly",
    )
    vector_embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="Embedding model used by the settings-based factory",
    )

    ###################################
    #           VALIDATORS            #
    ###################################
    @field_validator("qdrant_content_payload_key", "qdrant_metadata_payload_key")
    @classmethod
    def validate_payload_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Payload key cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_payload_keys_differ(self):
        if self.qdrant_content_payload_key == self.qdrant_metadata_payload_key:
            raise ValueError(
                "qdrant_content_payload_key and qdrant_metadata_payload_key must differ"
            )
        return self

    ###################################
    #           PROPERTIES            #
    ###################################
    @property
    def is_qdrant_configured(self) -> bool:
        """Check if a Qdrant URL is available"""
        return bool(self.qdrant_url)

    model_config = SettingsConfigDict(
        env_file=".env.test" if os.getenv("ENVIRONMENT") == "testing" else ".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get adapter settings (cached)

    Returns:
        Settings instance
    """
    return Settings()


# -------------------------------------------------------------
# Helpers for tests / scenarios requiring pure default settings
# -------------------------------------------------------------
class PureDefaultsSettings(Settings):  # type: ignore
    """Settings variant ignoring ENV, .env and secrets.

    Used in tests to obtain pure defaults (with validators) and
    to create instances with overrides that go through full validation.
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Only use init_settings source - no ENV, no .env, no secrets
        return (init_settings,)


def get_settings_pure_defaults() -> Settings:
    """Return instance with default values only (validators active, no ENV/.env)."""
    return PureDefaultsSettings()


def build_pure_defaults_with_overrides(**overrides: Any) -> Settings:
    """Create PureDefaultsSettings instance with overrides, all validated."""
    return PureDefaultsSettings(**overrides)


@contextmanager
def isolated_settings_environment(clear: bool = True):
    """Test context isolating ENV and get_settings cache.

    Usage:
        with isolated_settings_environment():
            s = get_settings()
            ... assertions ...

    Args:
        clear: if True, removes all existing environment variables (restored after exit)
    """
    original_env = dict(os.environ)
    try:
        if clear:
            os.environ.clear()
        get_settings.cache_clear()
        yield
    finally:
        os.environ.clear()
        os.environ.update(original_env)
        get_settings.cache_clear()
