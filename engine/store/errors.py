"""Errors raised by the remote store client."""

from __future__ import annotations

from typing import Any, Dict, Optional

from engine.error_handler import GameError

# Postgres / PostgREST codes the client reacts to
RLS_VIOLATION_CODES = ("42501", "P0001")
NO_ROWS_CODE = "PGRST116"
NETWORK_ERROR_CODE = "network"


class StoreError(GameError):
    """
    A store request failed.

    Carries the PostgREST error body fields when the server sent one; a
    transport failure has code "network" and no status.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, user_message="The request could not be completed.")
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    @classmethod
    def from_body(cls, body: Any, status: int) -> "StoreError":
        if isinstance(body, dict):
            return cls(
                str(body.get("message") or f"Store request failed with status {status}"),
                code=body.get("code"),
                details=body.get("details"),
                hint=body.get("hint"),
                status=status,
            )
        return cls(f"Store request failed with status {status}: {body}", status=status)

    @property
    def is_rls_violation(self) -> bool:
        return self.code in RLS_VIOLATION_CODES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": str(self),
            "code": self.code,
            "details": self.details,
            "hint": self.hint,
            "status": self.status,
        }
