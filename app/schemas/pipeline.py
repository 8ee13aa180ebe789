"""Pydantic models for the request pipeline: the request view and the HTTPS decision."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IncomingRequest(BaseModel):
    """Read-only view of the parts of a request the HTTPS check needs."""

    model_config = ConfigDict(frozen=True)

    scheme: str = Field(description="URL scheme as received (http or https)")
    host: str = Field(default="", description="Raw Host header, may include a port")
    path: str = Field(default="/", description="Raw (percent-encoded) request path")
    query: str = Field(default="", description="Raw query string without the leading '?'")


class PipelineDecision(BaseModel):
    """Outcome of the HTTPS-enforcement step: continue, or redirect to target_url."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["continue", "redirect"]
    target_url: str | None = None

    @model_validator(mode="after")
    def validate_target_url(self) -> "PipelineDecision":
        if self.kind == "redirect" and not self.target_url:
            raise ValueError("a redirect decision requires target_url")
        if self.kind == "continue" and self.target_url is not None:
            raise ValueError("a continue decision must not carry target_url")
        return self

    @classmethod
    def proceed(cls) -> "PipelineDecision":
        return cls(kind="continue")

    @classmethod
    def redirect(cls, target_url: str) -> "PipelineDecision":
        return cls(kind="redirect", target_url=target_url)

    @property
    def is_redirect(self) -> bool:
        return self.kind == "redirect"
