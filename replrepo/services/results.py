"""Result type shared by the screen services."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ActionResult:
    """
    Outcome of a user action.

    Attributes:
        success: Whether the action went through.
        message: Text to show the user (success note or error).
        data: The row created or affected, when there is one.
    """
    success: bool
    message: str = ""
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(success=False, message=message)
