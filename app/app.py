from __future__ import annotations

import io
import json
import os
from pathlib import Path
import sys
from typing import Optional

from flask import Flask, request, url_for, send_from_directory, jsonify, send_file

ROOT = Path(__file__).resolve().parent.parent
# Asegurar que la raíz del repo esté en sys.path al ejecutar `python app/app.py`
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Forzar backend no interactivo para Matplotlib (evita GUI en threads)
os.environ.setdefault("MPLBACKEND", "Agg")

from huffpack import main as coder
from huffpack.report import format_report, code_table_frame


def create_app(outputs_root: Optional[str] = None) -> Flask:
    app = Flask(__name__)

    OUTPUTS_ROOT = Path(outputs_root) if outputs_root else ROOT / "outputs_ui"

    def _ts_dir(base: Path) -> Path:
        import datetime
        d = base / datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        d.mkdir(parents=True, exist_ok=True)
        return d

    def _write_json(path: Path, data: dict):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _append_log(path: Path, line: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line.rstrip() + "\n")

    def _read_upload() -> tuple[bytes, str]:
        up = request.files.get("file")
        if up is not None:
            return up.read(), up.filename or "input.bin"
        return request.get_data(), "input.bin"

    @app.get("/")
    def index():
        return jsonify({
            "ok": True,
            "endpoints": {
                "compress": url_for("api_compress"),
                "decompress": url_for("api_decompress"),
                "download": url_for("download"),
            },
            "formats": list(coder.FORMATS),
        })

    @app.post("/api/compress")
    def api_compress():
        data, name = _read_upload()
        fmt = request.form.get("format") or request.args.get("format") or "packed"
        try:
            if fmt not in coder.FORMATS:
                raise ValueError(f"Formato no soportado: {fmt}")
            # El pipeline corre antes de crear la carpeta: si falla no queda nada a medias
            result = coder.run_pipeline(data)
            payload = coder.serialize(result, fmt)
            report = format_report(result.entries, result.code, result.stats)

            out_dir = _ts_dir(OUTPUTS_ROOT)
            log_path = out_dir / "run_log.txt"
            _append_log(log_path, f"compress start: file={name}, bytes={len(data)}, format={fmt}")

            out_name = "compressed.huf" if fmt == "packed" else "compressed.txt"
            (out_dir / out_name).write_bytes(payload)
            (out_dir / "table.txt").write_text(report, encoding="utf-8")
            try:
                coder.save_artifacts(result, data, str(out_dir), fmt=fmt)
            except Exception as ex:
                _append_log(log_path, f"[WARN] Figuras/CSV no generados: {ex}")
            _write_json(out_dir / "params.json", {"file": name, "format": fmt, "out": str(out_dir)})
            _append_log(log_path, f"compress OK: {result.stats.output_bits} bits")

            files = sorted(str(p.relative_to(out_dir)) for p in out_dir.rglob("*") if p.is_file())
            table = json.loads(code_table_frame(result.entries, result.code).to_json(orient="records", force_ascii=False))
            return jsonify({
                "ok": True,
                "out": str(out_dir),
                "files": files,
                "stats": result.stats.as_dict(),
                "table": table,
                "report": report,
            })
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400

    @app.post("/api/decompress")
    def api_decompress():
        blob, name = _read_upload()
        try:
            data = coder.decompress_bytes(blob)
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return send_file(io.BytesIO(data), mimetype="application/octet-stream",
                         as_attachment=True, download_name=Path(name).stem + ".out")

    # Descarga de archivos de salida
    @app.get("/download")
    def download():
        out_dir = request.args.get("out")
        fname = request.args.get("file")
        if not out_dir or not fname:
            return jsonify({"ok": False, "error": "Parámetros de descarga inválidos"}), 400
        d = Path(out_dir).resolve()
        # Restringir a OUTPUTS_ROOT
        if not d.is_relative_to(OUTPUTS_ROOT.resolve()):
            return jsonify({"ok": False, "error": "Acceso denegado"}), 403
        return send_from_directory(d, fname, as_attachment=True)

    return app


app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=True)
