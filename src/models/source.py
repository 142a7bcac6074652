"""Source model: one analyzed file per unit."""

from __future__ import annotations

from enum import Enum
from posixpath import basename

from pydantic import BaseModel, ConfigDict, Field


class Layer(str, Enum):
    """Architectural layers, in default classification priority order."""

    DOMAIN = "domain"
    APPLICATION = "application"
    INFRASTRUCTURE = "infrastructure"
    SHARED = "shared"


class SourceUnit(BaseModel):
    """An analyzed source file with its lexically extracted imports/exports."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Path relative to the analyzed root (POSIX)")
    content: str = Field(repr=False)
    imports: tuple[str, ...] = Field(
        default=(),
        description="Import specifiers as written, in source order",
    )
    exports: tuple[str, ...] = Field(
        default=(),
        description="Names of exported declarations",
    )
    layer: Layer | None = None

    @property
    def filename(self) -> str:
        return basename(self.path)


__all__ = ["Layer", "SourceUnit"]
