"""Errors raised by the Dwolla client and their translation to API errors."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import httpx

from ...core.exceptions import ValidationError


@dataclass(frozen=True)
class DwollaFieldError:
    """One field-level complaint from the processor."""

    path: str | None
    code: str | None
    message: str

    @property
    def field(self) -> str | None:
        if not self.path:
            return None
        return self.path.lstrip("/").replace("/", ".")

    def as_dict(self) -> dict:
        return {"path": self.path, "code": self.code, "message": self.message}


@dataclass(eq=False)
class DwollaRequestError(Exception):
    """A non-2xx answer from the Dwolla API."""

    status_code: int
    code: str | None
    message: str
    errors: list[DwollaFieldError] = field(default_factory=list)

    def __post_init__(self):
        super().__init__(self.message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "DwollaRequestError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        errors = [
            DwollaFieldError(
                path=error.get("path"),
                code=error.get("code"),
                message=error.get("message", ""),
            )
            for error in body.get("_embedded", {}).get("errors", [])
        ]
        return cls(
            status_code=response.status_code,
            code=body.get("code"),
            message=body.get("message") or response.reason_phrase or "Request failed",
            errors=errors,
        )

    def to_validation_error(self) -> ValidationError:
        """Validation error echoing the processor's own complaint."""
        field_name = self.errors[0].field if len(self.errors) == 1 else None
        return ValidationError(
            self.message,
            field=field_name,
            details={
                "processor_code": self.code,
                "errors": [error.as_dict() for error in self.errors],
            },
        )


@contextmanager
def processor_errors() -> Iterator[None]:
    """Translate processor rejections raised inside the block."""
    try:
        yield
    except DwollaRequestError as e:
        raise e.to_validation_error() from e
