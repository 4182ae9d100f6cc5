"""Tagged success/failure results returned by the non-raising codec entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .errors import CodecError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CodecResult(Generic[T]):
    """Either a value or a :class:`CodecError`, plus warnings and metadata."""

    value: T | None = None
    error: CodecError | None = None
    warnings: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: T, *, warnings: tuple[str, ...] = (), **metadata: Any) -> CodecResult[T]:
        return cls(value=value, warnings=warnings, metadata=metadata)

    @classmethod
    def failure(cls, error: CodecError, *, warnings: tuple[str, ...] = (), **metadata: Any) -> CodecResult[T]:
        merged = {**error.details, **metadata}
        return cls(error=error, warnings=warnings, metadata=merged)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value or re-raise the captured error."""

        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
