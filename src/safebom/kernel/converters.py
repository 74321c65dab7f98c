"""Scalar converters for non-trivial field encodings.

Each converter takes the raw text (or element) exactly as it appeared in
the document and returns the typed value, raising ValueError on input
it does not recognize. Nothing here coerces an unknown value into a
default.
"""

import base64
import binascii
import re
from datetime import datetime
from enum import Enum
from typing import Optional, Type, TypeVar

from lxml import etree
from pydantic import AwareDatetime, TypeAdapter, ValidationError

from safebom.model import AttachmentText, Encoding, Hash, HashAlgorithm

E = TypeVar("E", bound=Enum)

_XSD_TRUE = {"true", "1"}
_XSD_FALSE = {"false", "0"}

_XSD_DATETIME = re.compile(r"-?\d{4,}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?")
_AWARE_DATETIME = TypeAdapter(AwareDatetime)


def element_text(element: etree._Element) -> str:
    """Text content of a simple element, whitespace-trimmed.

    Text on either side of a child node (such as an unexpanded entity
    reference) is kept; the child itself contributes nothing.
    """
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts).strip()


def convert_timestamp(value: str) -> datetime:
    """Parse an xs:dateTime into an aware datetime.

    Values without a UTC offset are rejected.
    """
    value = value.strip()
    if not _XSD_DATETIME.fullmatch(value):
        raise ValueError(f"timestamp must be ISO 8601 format, got '{value}'")
    try:
        return _AWARE_DATETIME.validate_python(value)
    except ValidationError as e:
        if any(error["type"] == "timezone_aware" for error in e.errors()):
            raise ValueError(f"timestamp must carry a timezone offset, got '{value}'")
        raise ValueError(f"timestamp must be ISO 8601 format, got '{value}'")


def convert_enum(enum_cls: Type[E], token: str) -> E:
    """Map a serialized token to an enum member by exact value.

    Unknown tokens are rejected, never mapped to a fallback member.
    """
    token = token.strip()
    try:
        return enum_cls(token)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"unrecognized {enum_cls.__name__} token '{token}' (expected one of: {allowed})")


def convert_bool(value: str) -> bool:
    """Parse an xs:boolean lexical value."""
    value = value.strip()
    if value in _XSD_TRUE:
        return True
    if value in _XSD_FALSE:
        return False
    raise ValueError(f"boolean must be one of true, false, 1, 0, got '{value}'")


def convert_int(value: str) -> int:
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"integer expected, got '{value}'")


def convert_hash(element: etree._Element) -> Hash:
    """Convert <hash alg="SHA-256">hex</hash> into a Hash."""
    alg = element.get("alg")
    if alg is None:
        raise ValueError("hash is missing its 'alg' attribute")
    return Hash(algorithm=convert_enum(HashAlgorithm, alg), value=element_text(element))


def convert_attachment(element: etree._Element) -> AttachmentText:
    """Convert an attached-text element, decoding its payload.

    The decoded bytes are kept together with the declared encoding so the
    original representation is not lost.
    """
    raw = element.text or ""
    encoding_token: Optional[str] = element.get("encoding")
    content_type = element.get("content-type") or "text/plain"

    if encoding_token is None:
        return AttachmentText(content_type=content_type, encoding=None, content=raw.encode("utf-8"))

    # base64 is the only encoding the schema defines
    encoding = convert_enum(Encoding, encoding_token)
    try:
        content = base64.b64decode("".join(raw.split()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 attachment: {e}")
    return AttachmentText(content_type=content_type, encoding=encoding, content=content)
