"""
Byte-to-text decoding for uploaded files.

Rules:
- Detect encoding best-effort via charset-normalizer.
- If detection finds nothing, try UTF-8.
- If decode fails, fall back to UTF-8 with replacement characters and report it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from charset_normalizer import from_bytes

log = logging.getLogger(__name__)


def decode_upload(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # A UTF-8 BOM is dropped here; the parser also drops a leftover U+FEFF.
    if raw.startswith(b"\xef\xbb\xbf") and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        decode_fallback = True
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
            log.warning("Upload is not valid %s; decoded with replacement characters", detected or "utf-8")

    return text, {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }
