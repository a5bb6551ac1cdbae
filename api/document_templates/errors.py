"""
Typed errors raised by the template service.

`main.py` maps them onto HTTP responses; the message is shown to the caller
verbatim.
"""

from __future__ import annotations


class TemplateError(RuntimeError):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TemplateError):
    status_code = 400


class NotFoundError(TemplateError):
    status_code = 404


class ConflictError(TemplateError):
    status_code = 409
