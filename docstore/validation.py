from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from .errors import DocumentValidationError


@runtime_checkable
class Validator(Protocol):
    """
    Normalizes an input document into its stored shape.

    Returns the normalized document (defaults applied) or raises
    DocumentValidationError.
    """

    def validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        ...


class PydanticValidator(Validator):
    def __init__(self, model: type[BaseModel], name: str | None = None):
        self._model = model
        self._name = name or model.__name__

    @property
    def model(self) -> type[BaseModel]:
        return self._model

    def validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        try:
            record = self._model.model_validate(dict(data))
        except ValidationError as e:
            raise DocumentValidationError(self._name, errors=e.errors(include_url=False)) from e
        # python mode keeps datetimes, sets and bytes native for the transformers
        return record.model_dump()


class FunctionValidator(Validator):
    """
    Adapts a plain callable. The callable may raise DocumentValidationError,
    ValueError or TypeError to reject a document.
    """

    def __init__(self, fn: Callable[[Mapping[str, Any]], Mapping[str, Any]], name: str | None = None):
        self._fn = fn
        self._name = name or getattr(fn, "__name__", "document")

    def validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        try:
            result = self._fn(data)
        except DocumentValidationError:
            raise
        except (ValueError, TypeError) as e:
            raise DocumentValidationError(self._name, errors=[{"type": "value_error", "msg": str(e)}]) from e
        if not isinstance(result, Mapping):
            raise DocumentValidationError(self._name, message=f"Validator for {self._name!r} did not return a document")
        return dict(result)


def as_validator(obj: Any, name: str | None = None) -> Validator:
    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return PydanticValidator(obj, name=name)
    if isinstance(obj, Validator):
        return obj
    if callable(obj):
        return FunctionValidator(obj, name=name)
    raise TypeError(f"Cannot use {obj!r} as a validator")
