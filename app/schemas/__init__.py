"""Pydantic request/decision schemas."""

from app.schemas.pipeline import IncomingRequest, PipelineDecision

__all__ = [
    "IncomingRequest",
    "PipelineDecision",
]
