"""Byte serialization for detail records stored on disk."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import DecodeError

ModelT = TypeVar("ModelT", bound=BaseModel)


class DetailSerializer(Generic[ModelT]):
    """Convert a pydantic detail record to and from compact JSON bytes.

    ``decode`` also accepts raw TMDb response bodies because the records
    ignore fields they do not declare.
    """

    def __init__(self, model_type: type[ModelT]) -> None:
        self.model_type = model_type

    def encode(self, value: ModelT) -> bytes:
        if not isinstance(value, self.model_type):
            raise TypeError(
                f"Expected {self.model_type.__name__}, got {type(value).__name__}"
            )
        return value.model_dump_json().encode("utf-8")

    def decode(self, data: bytes) -> ModelT:
        """Return the record encoded in *data*.

        Raises:
            DecodeError: if *data* is not valid JSON for ``model_type``.
        """

        try:
            return self.model_type.model_validate_json(data)
        except ValidationError as exc:
            raise DecodeError(
                f"Invalid {self.model_type.__name__} payload: "
                f"{exc.error_count()} validation error(s)"
            ) from exc
        except (TypeError, ValueError, UnicodeError) as exc:
            raise DecodeError(
                f"Undecodable {self.model_type.__name__} payload: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return f"DetailSerializer({self.model_type.__name__})"


__all__ = ["DetailSerializer"]
