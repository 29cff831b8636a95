"""Turn raw log lines into bulk ``create`` action/source pairs."""

from typing import Union

from .errors import ConfigurationError, LineEncodingError
from .models import EncodedDocument

ACTION_LINE = '{"create":{}}'
DEFAULT_FIELD = "message"
DECODING_POLICIES = ("replace", "backslashreplace", "ignore", "strict")

# JSON forbids raw C0 control characters inside strings
_ESCAPES = {code: "\\u%04x" % code for code in range(0x20)}
_ESCAPES.update({
    ord("\\"): "\\\\",
    ord('"'): '\\"',
    ord("\r"): "\\r",
    ord("\n"): "\\n",
    ord("\t"): "\\t",
    ord("\f"): "\\f",
    ord("\b"): "\\b",
})


def check_policy(errors: str) -> str:
    if errors not in DECODING_POLICIES:
        raise ConfigurationError(
            f"Unknown decoding policy {errors!r}",
            hint="Choose one of: " + ", ".join(DECODING_POLICIES),
        )
    return errors


def decode_line(line: bytes, errors: str = "replace") -> str:
    try:
        return line.decode("utf-8", errors=check_policy(errors))
    except UnicodeDecodeError as e:
        raise LineEncodingError(
            f"Invalid UTF-8 at byte {e.start}: {line[e.start:e.end]!r}",
            line=line,
            position=e.start,
        ) from e


def escape_line(line: Union[bytes, str], errors: str = "replace") -> str:
    """Return ``line`` as the body of a JSON string literal.

    Bytes are decoded as UTF-8 using the codec error handler ``errors``.
    The translation runs in a single pass, so the backslashes it introduces
    are never escaped a second time. Applying it twice is not a no-op.
    """
    if isinstance(line, bytes):
        line = decode_line(line, errors)
    return line.translate(_ESCAPES)


def encode_document(escaped: str, field_name: str = DEFAULT_FIELD) -> EncodedDocument:
    return EncodedDocument(
        action=ACTION_LINE,
        source='{"%s":"%s"}' % (escape_line(field_name), escaped),
    )


def encode_line(
    line: Union[bytes, str],
    field_name: str = DEFAULT_FIELD,
    errors: str = "replace",
) -> EncodedDocument:
    return encode_document(escape_line(line, errors), field_name)
