"""Media constraint models."""
from typing import List

from pydantic import BaseModel, Field


class KeyValuePair(BaseModel):
    """A single media constraint entry."""

    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"


class MediaConstraints(BaseModel):
    """Mandatory and optional constraints handed to the peer connection."""

    mandatory: List[KeyValuePair] = Field(default_factory=list)
    optional: List[KeyValuePair] = Field(default_factory=list)

    def __str__(self) -> str:
        mandatory = ", ".join(str(pair) for pair in self.mandatory)
        optional = ", ".join(str(pair) for pair in self.optional)
        return f"mandatory: [{mandatory}], optional: [{optional}]"
