from fastapi import FastAPI, UploadFile, File, HTTPException
from .dataurl import decode_payload, parse_data_url
from .encoding import decode_upload
from .logs import get_logger
from .models import DataUrlRequest, DataUrlResponse, HealthResponse, ParseRequest, ParseResponse
from .parser import sniff_and_parse
from .rules import UPLOAD_EXTENSIONS

log = get_logger()

app = FastAPI(
    title="csv-sniffer",
    description="Delimiter-sniffing CSV parsing with data: URL input",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/parse", response_model=ParseResponse, response_model_exclude_none=True)
def parse_text(body: ParseRequest):
    text = body.text

    data_url = parse_data_url(text)
    if data_url is not None:
        decoded = decode_payload(data_url)
        if not decoded.ok:
            raise HTTPException(status_code=422, detail=decoded.error.model_dump())
        text = decoded.text

    delimiter, table = sniff_and_parse(text)
    return ParseResponse(delimiter=delimiter, table=table)

@app.post("/parse/upload", response_model=ParseResponse, response_model_exclude_none=True)
async def parse_upload(file: UploadFile = File(...)):
    if not (file.filename or "").lower().endswith(UPLOAD_EXTENSIONS):
        raise HTTPException(status_code=422, detail="Only CSV, TSV or TXT files are supported")

    raw = await file.read()
    text, report = decode_upload(raw)
    log.info("Parsing upload %s (%d bytes, %s)", file.filename, len(raw), report["decode_used"])

    delimiter, table = sniff_and_parse(text)
    return ParseResponse(delimiter=delimiter, table=table, encoding=report)

@app.post("/data-url", response_model=DataUrlResponse)
def inspect_data_url(body: DataUrlRequest):
    data_url = parse_data_url(body.url)
    if data_url is None:
        raise HTTPException(status_code=422, detail="Not a data: URL")

    return DataUrlResponse(data_url=data_url, decoded=decode_payload(data_url))
