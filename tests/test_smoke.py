import base64

from fastapi.testclient import TestClient
from csv_sniffer.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_parse_text():
    r = client.post("/parse", json={"text": "a;b;c\n1;2;3"})
    assert r.status_code == 200
    assert r.json() == {
        "delimiter": ";",
        "table": {"headers": ["a", "b", "c"], "rows": [["1", "2", "3"]]},
    }

def test_parse_omits_headers_for_numeric_first_row():
    r = client.post("/parse", json={"text": "1,2\n3,4"})
    assert r.status_code == 200
    assert r.json()["table"] == {"rows": [["1", "2"], ["3", "4"]]}

def test_parse_data_url_input():
    payload = base64.b64encode("name,city\nPaul,Montréal\n".encode("utf-8")).decode("ascii")
    r = client.post("/parse", json={"text": f"data:text/csv;base64,{payload}"})
    assert r.status_code == 200
    assert r.json()["table"] == {"headers": ["name", "city"], "rows": [["Paul", "Montréal"]]}

def test_parse_broken_data_url_is_rejected():
    r = client.post("/parse", json={"text": "data:text/csv;base64,not*base64"})
    assert r.status_code == 422
    assert r.json()["detail"]["kind"] == "invalid_base64"

def test_parse_upload_latin1():
    # Latin-1 bytes must come back as proper text
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")

    files = {"file": ("test.csv", raw, "text/csv")}
    r = client.post("/parse/upload", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["delimiter"] == ","
    assert data["table"]["headers"] == ["name", "city"]
    assert data["table"]["rows"][0] == ["Paul", "Montréal"]
    assert "decode_used" in data["encoding"]

def test_parse_upload_utf8_bom_tsv():
    raw = "\ufeffid\tname\n1\tAda\n".encode("utf-8")

    files = {"file": ("people.tsv", raw, "text/tab-separated-values")}
    r = client.post("/parse/upload", files=files)
    assert r.status_code == 200
    assert r.json()["delimiter"] == "\t"
    assert r.json()["table"] == {"headers": ["id", "name"], "rows": [["1", "Ada"]]}

def test_parse_upload_rejects_other_extensions():
    files = {"file": ("test.json", b"{}", "application/json")}
    r = client.post("/parse/upload", files=files)
    assert r.status_code == 422

def test_inspect_data_url():
    r = client.post("/data-url", json={"url": "data:text/plain;base64,SGVsbG8="})
    assert r.status_code == 200
    data = r.json()
    assert data["data_url"] == {"mime": "text/plain", "is_base64": True, "payload": "SGVsbG8="}
    assert data["decoded"]["ok"] is True
    assert data["decoded"]["text"] == "Hello"

def test_inspect_non_data_url():
    r = client.post("/data-url", json={"url": "https://example.com/a.csv"})
    assert r.status_code == 422

def test_parse_data_url_with_non_utf8_payload():
    payload = base64.b64encode("a,b\nx,Montréal".encode("latin-1")).decode("ascii")
    r = client.post("/parse", json={"text": f"data:text/csv;base64,{payload}"})
    assert r.status_code == 200
    assert r.json()["table"] == {"headers": ["a", "b"], "rows": [["x", "Montr\ufffdal"]]}

def test_parse_unpadded_data_url():
    payload = base64.b64encode(b"k,v\nx,1").decode("ascii").rstrip("=")
    r = client.post("/parse", json={"text": f"data:;base64,{payload}"})
    assert r.status_code == 200
    assert r.json()["table"] == {"headers": ["k", "v"], "rows": [["x", "1"]]}
