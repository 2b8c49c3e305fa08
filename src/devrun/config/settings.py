"""Pydantic Settings models for devrun configuration."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class SearchSettings(BaseModel):
    """Project root search configuration."""

    levels: int = Field(default=3, ge=0, le=255)
    ignore_tools: Annotated[list[str], NoDecode] = Field(default_factory=list)

    @field_validator("ignore_tools", mode="before")
    @classmethod
    def split_ignore_tools(cls, v: Any) -> Any:
        """Accept "yarn,pnpm" (env vars) as well as a YAML list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class OutputSettings(BaseModel):
    """Console output configuration."""

    verbose: bool = False
    quiet: bool = False
    show_timing: bool = False


class DevrunSettings(BaseSettings):
    """Root settings with layered config: defaults -> file -> env -> CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DEVRUN_",
        env_nested_delimiter="__",
    )

    search: SearchSettings = Field(default_factory=SearchSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    aliases: dict[str, str] = Field(default_factory=dict)

    def resolve_alias(self, command: str) -> str:
        """Map a configured alias (e.g. "t" -> "test"); other names pass through."""
        return self.aliases.get(command, command)
