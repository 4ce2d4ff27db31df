import io

import pytest

from app.app import create_app

TEXT = b"hello huffman, hello world" * 10


@pytest.fixture
def client(tmp_path):
    app = create_app(outputs_root=str(tmp_path / "outputs"))
    app.config["TESTING"] = True
    return app.test_client()


def _upload(data, name="in.txt", **form):
    return dict(form, file=(io.BytesIO(data), name))


def test_index_lists_endpoints(client):
    res = client.get("/")
    assert res.status_code == 200
    body = res.get_json()
    assert body["ok"] is True
    assert body["endpoints"]["compress"] == "/api/compress"
    assert "packed" in body["formats"]


def test_compress_returns_stats_and_files(client):
    res = client.post("/api/compress", data=_upload(TEXT), content_type="multipart/form-data")
    assert res.status_code == 200
    body = res.get_json()
    assert body["ok"] is True
    assert body["stats"]["input_bits"] == 8 * len(TEXT)
    assert "compressed.huf" in body["files"]
    assert "table.txt" in body["files"]
    assert "run_log.txt" in body["files"]
    assert {row["Símbolo"] for row in body["table"]} == set(TEXT)
    assert body["report"].startswith("Símbolo:")


def test_compress_raw_body_text_format(client):
    res = client.post("/api/compress?format=text", data=b"AB")
    body = res.get_json()
    assert body["ok"] is True
    assert body["stats"]["output_bits"] == 2
    assert "compressed.txt" in body["files"]


def test_compress_empty_input_is_400(client, tmp_path):
    res = client.post("/api/compress", data=_upload(b""), content_type="multipart/form-data")
    assert res.status_code == 400
    assert res.get_json()["ok"] is False
    assert not (tmp_path / "outputs").exists()


def test_decompress_roundtrip(client):
    body = client.post("/api/compress", data=_upload(TEXT), content_type="multipart/form-data").get_json()
    res = client.get("/download", query_string={"out": body["out"], "file": "compressed.huf"})
    assert res.status_code == 200
    blob = res.data

    res = client.post("/api/decompress", data=_upload(blob, "compressed.huf"), content_type="multipart/form-data")
    assert res.status_code == 200
    assert res.data == TEXT


def test_decompress_bad_payload_is_400(client):
    res = client.post("/api/decompress", data=_upload(b"garbage"), content_type="multipart/form-data")
    assert res.status_code == 400


def test_download_outside_outputs_is_denied(client, tmp_path):
    res = client.get("/download", query_string={"out": str(tmp_path), "file": "x"})
    assert res.status_code == 403


def test_app_has_no_session_secret(tmp_path):
    assert create_app(outputs_root=str(tmp_path)).secret_key is None


def test_server_side_io_error_is_500(tmp_path):
    blocker = tmp_path / "outputs"
    blocker.write_text("no soy un directorio")
    app = create_app(outputs_root=str(blocker))
    res = app.test_client().post("/api/compress", data=_upload(TEXT), content_type="multipart/form-data")
    assert res.status_code == 500
