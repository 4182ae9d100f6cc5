"""Custom exception hierarchy for the accumulator codec and the price service."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar


class ErrorKind(StrEnum):
    """Stable identifiers attached to every codec failure."""

    BAD_MAGIC = "bad_magic"
    UNSUPPORTED_VERSION = "unsupported_version"
    UNSUPPORTED_TYPE = "unsupported_type"
    UNSUPPORTED_MESSAGE_TYPE = "unsupported_message_type"
    TRUNCATED = "truncated"
    INVALID_HEX = "invalid_hex"
    INDEX_NOT_FOUND = "index_not_found"
    INVALID_FEED_ID_LENGTH = "invalid_feed_id_length"
    FIELD_OUT_OF_RANGE = "field_out_of_range"
    ROUND_TRIP_MISMATCH = "round_trip_mismatch"
    INVALID_CALLDATA = "invalid_calldata"


class CodecError(RuntimeError):
    """Base class for all codec failures.

    ``details`` carries structured metadata (expected vs. actual sizes, offsets,
    offending indices) so callers can report more than the message string.
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details

    @property
    def message(self) -> str:
        return str(self)


class DecodeError(CodecError):
    """Raised when a buffer cannot be parsed as an accumulator update."""


class BadMagicError(DecodeError):
    """The buffer does not start with the ``PNAU`` magic."""

    kind = ErrorKind.BAD_MAGIC


class UnsupportedUpdateTypeError(DecodeError):
    """The header update type is not a price update."""

    kind = ErrorKind.UNSUPPORTED_TYPE


class UnsupportedMessageTypeError(DecodeError):
    """A message inside the container carries an unknown type tag."""

    kind = ErrorKind.UNSUPPORTED_MESSAGE_TYPE


class TruncatedPayloadError(DecodeError):
    """A declared length or count runs past the end of the buffer."""

    kind = ErrorKind.TRUNCATED


class InvalidHexPayloadError(DecodeError):
    """A transport payload could not be converted from hex to bytes."""

    kind = ErrorKind.INVALID_HEX


class EncodeError(CodecError):
    """Raised when records cannot be serialized into an accumulator update."""


class IndexNotFoundError(EncodeError):
    """One or more selection indices do not resolve to a record."""

    kind = ErrorKind.INDEX_NOT_FOUND


class InvalidFeedIdError(EncodeError):
    """A feed id is not exactly 32 bytes of hex."""

    kind = ErrorKind.INVALID_FEED_ID_LENGTH


class FieldOutOfRangeError(EncodeError):
    """A numeric field does not fit its fixed-width wire encoding."""

    kind = ErrorKind.FIELD_OUT_OF_RANGE


class RoundTripMismatchError(CodecError):
    """Re-decoding an encoded payload did not reproduce the selected feeds."""

    kind = ErrorKind.ROUND_TRIP_MISMATCH


class InvalidCalldataError(CodecError):
    """Calldata does not match the expected selector or ABI layout."""

    kind = ErrorKind.INVALID_CALLDATA


class PriceServiceError(RuntimeError):
    """Base class for failures talking to the remote price service."""


class PriceServiceTransientError(PriceServiceError):
    """Represents temporary issues such as rate limiting or network failures."""


class InvalidFeedIdsError(PriceServiceError):
    """Raised when no requested feed id is well-formed."""
