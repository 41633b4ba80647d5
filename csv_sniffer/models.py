from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class DataUrl(BaseModel):
    model_config = ConfigDict(frozen=True)

    mime: str
    is_base64: bool
    payload: str


class DecodeError(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["invalid_base64"]
    detail: str = ""


class DecodeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool
    text: str = ""
    error: Optional[DecodeError] = None

    @classmethod
    def success(cls, text: str) -> "DecodeResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, kind: str, detail: str = "") -> "DecodeResult":
        return cls(ok=False, error=DecodeError(kind=kind, detail=detail))


class ParsedTable(BaseModel):
    """
    Rows in input order; ``headers`` is None when the first row looked like data.

    The parser never pads or rejects ragged input, so a row may be wider or
    narrower than ``headers``. ``ragged_rows`` lists those rows.
    """

    model_config = ConfigDict(frozen=True)

    headers: Optional[List[str]] = None
    rows: List[List[str]] = Field(default_factory=list)

    @property
    def ragged_rows(self) -> List[int]:
        if self.headers is None:
            return []
        width = len(self.headers)
        return [i for i, row in enumerate(self.rows) if len(row) != width]


# --- HTTP envelopes ---

class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    delimiter: str
    table: ParsedTable
    encoding: Optional[Dict[str, Any]] = None


class DataUrlRequest(BaseModel):
    url: str


class DataUrlResponse(BaseModel):
    data_url: DataUrl
    decoded: DecodeResult


class HealthResponse(BaseModel):
    ok: bool = True
