"""
Deterministic parsing rules.

This file exists to keep the heuristics' knobs in one place.
"""

BOM = "\ufeff"
DELIMITER_CANDIDATES = (",", ";", "\t")  # order breaks ties
QUOTE = '"'

DATA_URL_PREFIX = "data:"
DEFAULT_MIME = "text/plain"
BASE64_TOKEN = "base64"

UPLOAD_EXTENSIONS = (".csv", ".tsv", ".txt")
LOG_LEVEL_ENV = "CSV_SNIFFER_LOG_LEVEL"
