"""Application settings.

All configuration is sourced from environment variables (and optionally `.env`).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigurationError
from ..flowchart.layout import LayoutConfig


class Settings(BaseSettings):
    """Typed environment-backed settings for Flowcraft."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # Azure OpenAI. Optional here so layout-only use needs no credentials.
    endpoint: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("AZURE_OPENAI_ENDPOINT", "ENDPOINT")
    )
    api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("AZURE_OPENAI_API_KEY", "API_KEY")
    )
    deployment_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "AZURE_OPENAI_DEPLOYMENT", "AZURE_OPENAI_DEPLOYMENT_NAME", "DEPLOYMENT_NAME"
        ),
    )
    api_version: str = Field(
        default="2024-12-01-preview",
        validation_alias=AliasChoices("AZURE_OPENAI_API_VERSION", "API_VERSION"),
    )

    # Generation
    temperature: float = Field(default=0.2, alias="FLOWCRAFT_TEMPERATURE")
    max_tokens: int = Field(default=8192, alias="FLOWCRAFT_MAX_TOKENS")

    # Logging / HTTP
    log_level: str = Field(default="INFO", alias="FLOWCRAFT_LOG_LEVEL")
    json_logs: bool = Field(default=False, alias="FLOWCRAFT_JSON_LOGS")
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173", alias="FLOWCRAFT_CORS_ORIGINS"
    )

    # Layout geometry
    node_width: float = Field(default=220, alias="FLOWCRAFT_NODE_WIDTH")
    node_height: float = Field(default=140, alias="FLOWCRAFT_NODE_HEIGHT")
    x_gap: float = Field(default=60, alias="FLOWCRAFT_X_GAP")
    y_gap: float = Field(default=100, alias="FLOWCRAFT_Y_GAP")
    padding: float = Field(default=50, alias="FLOWCRAFT_CANVAS_PADDING")
    snake_columns: int = Field(default=4, alias="FLOWCRAFT_SNAKE_COLUMNS")

    def layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            node_width=self.node_width,
            node_height=self.node_height,
            x_gap=self.x_gap,
            y_gap=self.y_gap,
            padding=self.padding,
            snake_columns=self.snake_columns,
        )

    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def require_llm(self) -> None:
        missing = [
            name
            for name, value in (
                ("AZURE_OPENAI_ENDPOINT", self.endpoint),
                ("AZURE_OPENAI_API_KEY", self.api_key),
                ("AZURE_OPENAI_DEPLOYMENT", self.deployment_name),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables for flowchart generation",
                {"missing": missing},
            )
