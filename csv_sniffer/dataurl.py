"""
``data:`` URL helpers.

A data URL has the shape ``data:[<mime>][;param...][;base64],<payload>``.
Parsing never fails: anything that is not a data URL yields None. Decoding
reports bad base64 as a DecodeResult instead of raising.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional
from urllib.parse import unquote

from .models import DataUrl, DecodeResult
from .rules import BASE64_TOKEN, DATA_URL_PREFIX, DEFAULT_MIME

log = logging.getLogger(__name__)

_B64_WHITESPACE_RE = re.compile(r"[\t\n\f\r ]")
_B64_ALPHABET_RE = re.compile(r"[A-Za-z0-9+/]*")


def parse_data_url(url: str) -> Optional[DataUrl]:
    if not url.startswith(DATA_URL_PREFIX):
        return None

    comma = url.find(",", len(DATA_URL_PREFIX))
    if comma == -1:
        return None

    parts = url[len(DATA_URL_PREFIX):comma].split(";")
    return DataUrl(
        mime=parts[0] or DEFAULT_MIME,
        is_base64=BASE64_TOKEN in parts,
        payload=url[comma + 1:],
    )


def decode_base64_to_text(payload: str, logger: Optional[logging.Logger] = None) -> DecodeResult:
    """
    Decode a base64 payload and read the bytes as UTF-8.

    Decoding is as forgiving as a browser's ``atob``: ASCII whitespace is
    ignored and missing padding is restored. Only a length of 1 mod 4 or a
    character outside the alphabet fails, with ``invalid_base64``. Bytes that
    are not UTF-8 become U+FFFD. Both problems are logged as warnings to
    ``logger`` (the module logger when not given).
    """
    logger = logger or log

    data = _B64_WHITESPACE_RE.sub("", payload)
    if len(data) % 4 == 0 and data.endswith("="):
        data = data[:-2] if data.endswith("==") else data[:-1]

    if len(data) % 4 == 1:
        logger.warning("Failed to decode base64: invalid length %d", len(data))
        return DecodeResult.failure("invalid_base64", f"invalid length {len(data)}")
    if not _B64_ALPHABET_RE.fullmatch(data):
        logger.warning("Failed to decode base64: character outside the alphabet")
        return DecodeResult.failure("invalid_base64", "character outside the alphabet")

    try:
        raw = base64.b64decode(data + "=" * (-len(data) % 4), validate=True)
    except binascii.Error as e:
        logger.warning("Failed to decode base64: %s", e)
        return DecodeResult.failure("invalid_base64", str(e))

    try:
        return DecodeResult.success(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        logger.warning("Decoded base64 payload is not UTF-8, replacing bad bytes: %s", e)
        return DecodeResult.success(raw.decode("utf-8", errors="replace"))


def decode_data_url(url: str, logger: Optional[logging.Logger] = None) -> Optional[DecodeResult]:
    """Parse ``url`` and return its payload as text, or None if it is not a data URL."""
    data_url = parse_data_url(url)
    if data_url is None:
        return None
    return decode_payload(data_url, logger=logger)


def decode_payload(data_url: DataUrl, logger: Optional[logging.Logger] = None) -> DecodeResult:
    if data_url.is_base64:
        return decode_base64_to_text(data_url.payload, logger=logger)
    # plain payloads are percent-encoded
    return DecodeResult.success(unquote(data_url.payload))
