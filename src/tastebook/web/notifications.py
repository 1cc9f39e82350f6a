"""
Tastebook - User notifications.

Every mutation answers with a short message the UI shows as a toast.
"""

from typing import Any, Literal

from pydantic import BaseModel

Level = Literal["success", "error", "info"]


class Notification(BaseModel):
    level: Level
    message: str


class MutationResponse(BaseModel):
    data: Any = None
    notification: Notification


def success(message: str, data: Any = None) -> MutationResponse:
    return MutationResponse(data=data, notification=Notification(level="success", message=message))


def error_body(message: str) -> dict:
    """JSON body for a failed request."""
    return {
        "detail": message,
        "notification": Notification(level="error", message=message).model_dump(),
    }
