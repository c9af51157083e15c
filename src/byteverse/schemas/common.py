"""Common response envelopes."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Envelope for responses that only carry a status message."""

    success: bool = True
    message: str | None = None
