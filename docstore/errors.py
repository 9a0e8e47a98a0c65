from __future__ import annotations

from typing import Any


class DocStoreError(Exception):
    """Base class for every error raised by docstore."""


class DocumentValidationError(DocStoreError, ValueError):
    """
    Raised when an input document is rejected by its model's validator.

    `errors` keeps the structured failure (pydantic's `errors()` shape when the
    validator is pydantic-backed).
    """

    def __init__(self, model: str, errors: list[dict[str, Any]] | None = None, message: str | None = None):
        self.model = model
        self.errors = list(errors or [])
        if message is None:
            message = f"Invalid document for model {model!r}"
            if self.errors:
                message += f" ({len(self.errors)} error{'s' if len(self.errors) != 1 else ''})"
        super().__init__(message)


class InvalidIdentifierError(DocStoreError, ValueError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid ObjectId: {value!r}")


class UnknownModelError(DocStoreError, KeyError):
    def __init__(self, model: str):
        self.model = model
        super().__init__(model)

    def __str__(self) -> str:
        return f"Unknown model {self.model!r}"


class PersistenceError(DocStoreError):
    pass


class PersistenceReadError(PersistenceError):
    pass


class PersistenceWriteError(PersistenceError):
    pass


class StoreClosedError(DocStoreError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Store has been disconnected")
