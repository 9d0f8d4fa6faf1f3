from typing import Any

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Envelope of every query API answer. data is set on success, error on failure."""

    success: bool
    data: Any = None
    error: str | None = None

    def to_content(self) -> dict:
        """Serialise for a JSONResponse, leaving out whichever of data/error is unset."""
        content: dict = {"success": self.success}
        if self.data is not None:
            content["data"] = self.data
        if self.error is not None:
            content["error"] = self.error
        return content
