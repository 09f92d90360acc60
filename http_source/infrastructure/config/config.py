"""
Environment configuration for http-source.

Loads configuration from environment variables using pydantic-settings.
Settings are frozen once loaded.
"""

import secrets
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from http_source.domain.value_objects import SecurityMode


class CorsSettings(BaseModel):
    """Cross-origin settings for the ingress endpoint."""

    model_config = ConfigDict(frozen=True)

    allowed_origins: List[str] = Field(
        default=["*"], min_length=1, description="Allowed origin patterns, e.g. http://domain1.com"
    )
    allowed_headers: List[str] = Field(
        default=["*"], min_length=1, description="Request headers allowed on the actual request"
    )
    allow_credentials: Optional[bool] = Field(
        default=None, description="Whether credentialed cross-origin requests are permitted"
    )
    allowed_methods: List[str] = Field(default=["GET", "HEAD", "POST"], min_length=1)
    max_age: int = Field(default=1800, ge=0, description="Pre-flight cache time in seconds")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HTTP_SOURCE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Ingress Configuration
    path_pattern: str = Field(default="/", min_length=1, description="HTTP endpoint path mapping")
    mapped_request_headers: List[str] = Field(
        default=["HTTP_REQUEST_HEADERS"], description="Header name patterns forwarded to the message"
    )

    # Security Configuration
    secured: bool = Field(default=False, description="Require HTTP Basic authentication")
    csrf_enabled: bool = Field(default=False, description="Require a CSRF token on POST when secured")
    security_user_name: str = Field(default="user", min_length=1)
    security_user_password: str = Field(default_factory=lambda: secrets.token_hex(16))
    security_exempt_paths: List[str] = Field(
        default=["/health"], description="Paths that never require authentication"
    )
    csrf_secret: str = Field(default_factory=lambda: secrets.token_hex(32))
    csrf_header_name: str = Field(default="X-CSRF-TOKEN")
    csrf_token_max_age: int = Field(default=3600, ge=1, description="Seconds a CSRF token stays valid")

    # CORS Configuration
    cors: CorsSettings = Field(default_factory=CorsSettings)

    # Sink Configuration
    sink_type: Literal["memory", "http", "rabbitmq"] = Field(default="memory")
    memory_sink_max_messages: int = Field(
        default=1000, ge=1, description="Messages kept by the memory sink before the oldest are dropped"
    )
    sink_http_url: str = Field(default="http://localhost:9000/messages")
    sink_http_timeout: float = Field(default=10.0, gt=0)
    rabbitmq_host: str = Field(default="localhost")
    rabbitmq_port: int = Field(default=5672, ge=1, le=65535)
    rabbitmq_exchange: str = Field(default="")
    rabbitmq_routing_key: str = Field(default="http-source")

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP API port")
    log_level: str = Field(default="INFO")
    log_format: Literal["text", "json"] = Field(
        default="text", description="Logging format - text for human-readable, json for structured logs"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("path_pattern")
    @classmethod
    def validate_path_pattern(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("path_pattern must start with '/'")
        return v

    @property
    def security_mode(self) -> SecurityMode:
        return SecurityMode.from_flags(self.secured, self.csrf_enabled)

    @property
    def password_generated(self) -> bool:
        """True when no password was configured and one was generated."""
        return "security_user_password" not in self.model_fields_set


@lru_cache()
def get_settings() -> Settings:
    """
    Get the settings singleton.

    lru_cache makes sure the environment is read only once.
    """
    return Settings()
