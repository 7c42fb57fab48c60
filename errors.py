from __future__ import annotations

from typing import Optional


class MathProblemError(Exception):
    """Base for errors raised by the problem lifecycle."""

    status_code = 500
    # 500-class errors never expose their detail to the caller
    expose_detail = False
    public_message = "Internal server error"

    def __init__(self, detail: str = "", public_message: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if public_message is not None:
            self.public_message = public_message

    @property
    def message(self) -> str:
        return self.detail if self.expose_detail and self.detail else self.public_message


class InvalidParameter(MathProblemError):
    status_code = 400
    expose_detail = True
    public_message = "Invalid request"


class NotFound(MathProblemError):
    status_code = 404
    expose_detail = True
    public_message = "Not found"


class GenerationFailure(MathProblemError):
    """The AI provider errored or returned nothing usable."""


class ParseFailure(MathProblemError):
    """The AI output was not the JSON shape we asked for."""


class PersistenceFailure(MathProblemError):
    pass
