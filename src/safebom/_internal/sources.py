"""Source normalization: turn every accepted input form into bytes.

Both passes over a document (namespace sniffing and deserialization)
need the same input, so sources are read into memory once. Files opened
here are closed on every exit path; streams supplied by the caller are
read but never closed.
"""

import os
import re
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

Source = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO, TextIO]

# 64 MiB; BOMs for very large systems stay well below this
DEFAULT_MAX_DOCUMENT_BYTES = 64 * 1024 * 1024

# Text input is already decoded, so a declared encoding no longer applies
_XML_DECLARATION_ENCODING = re.compile(
    r"""\A(\s*<\?xml\b[^>]*?)\s+encoding\s*=\s*(?:"[^"]*"|'[^']*')""",
)


class DocumentTooLargeError(ValueError):
    """Raised when a source exceeds the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(f"document exceeds the {limit} byte limit")
        self.limit = limit


def text_to_bytes(text: str) -> bytes:
    """Encode already-decoded XML text as UTF-8 for the parser."""
    text = text.lstrip("\ufeff")
    text = _XML_DECLARATION_ENCODING.sub(r"\1", text, count=1)
    return text.encode("utf-8")


def _check_size(data: bytes, max_bytes: Optional[int]) -> bytes:
    if max_bytes is not None and len(data) > max_bytes:
        raise DocumentTooLargeError(max_bytes)
    return data


def _read_stream(stream, max_bytes: Optional[int]) -> bytes:
    content = stream.read() if max_bytes is None else stream.read(max_bytes + 1)
    if isinstance(content, str):
        # Size limit applies to the encoded form
        return _check_size(text_to_bytes(content), max_bytes)
    if isinstance(content, (bytes, bytearray)):
        return _check_size(bytes(content), max_bytes)
    raise TypeError(f"stream returned {type(content).__name__}, expected bytes or str")


def read_source(source: Source, max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES) -> bytes:
    """Read a document source into bytes.

    Args:
        source: A filesystem path (str or PathLike), a byte buffer, a binary
            stream, or a text stream
        max_bytes: Upper bound on document size; None disables the check

    Returns:
        Document bytes

    Raises:
        OSError: If a path cannot be opened or read
        DocumentTooLargeError: If the document exceeds max_bytes
        TypeError: If the source is of an unsupported type
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return _check_size(bytes(source), max_bytes)
    if isinstance(source, (str, os.PathLike)):
        with open(Path(source), "rb") as f:
            return _read_stream(f, max_bytes)
    if hasattr(source, "read"):
        return _read_stream(source, max_bytes)
    raise TypeError(
        f"unsupported source type {type(source).__name__}: expected a path, bytes, or a readable stream"
    )
