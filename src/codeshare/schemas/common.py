"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire and in stored documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """Return a JSON-ready dict using wire aliases."""
        return self.model_dump(mode="json", by_alias=True)


class MessageResponse(CamelModel):
    """Generic success envelope."""

    success: bool = True
    message: str
