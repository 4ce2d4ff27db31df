import pandas as pd
import pytest

from huffpack.huffman import build_code, encode
from huffpack.report import code_table_frame, format_report, save_code_table_csv, save_metrics_csv


def _ab():
    entries, _, code = build_code(b"AB")
    _, stats = encode(b"AB", code)
    return entries, code, stats


def test_report_lists_only_present_symbols():
    entries, code, stats = _ab()
    text = format_report(entries, code, stats)
    symbol_lines = [l for l in text.splitlines() if l.startswith("Símbolo:")]
    assert len(symbol_lines) == 2
    assert "'A'" in symbol_lines[0] and "Frecuencia: 1" in symbol_lines[0]
    assert symbol_lines[0].endswith("Código: 0")
    assert symbol_lines[1].endswith("Código: 1")


def test_report_summary():
    entries, code, stats = _ab()
    text = format_report(entries, code, stats)
    assert "Tamaño original: 16 bits" in text
    assert "Tamaño de salida: 2 bits" in text
    assert "12.5000%" in text
    assert "8.0000 veces" in text
    assert "87.5000%" in text
    assert "Entropía de la fuente: 1.000000" in text


def test_non_printable_symbols_are_shown_in_hex():
    data = b"\x00\x00\n"
    entries, _, code = build_code(data)
    _, stats = encode(data, code)
    text = format_report(entries, code, stats)
    assert "0x00" in text and "0x0a" in text


def test_code_table_csv(tmp_path):
    entries, code, _ = _ab()
    save_code_table_csv(str(tmp_path), entries, code)
    df = pd.read_csv(tmp_path / "tabla_codigos.csv", dtype={"Código": str})
    assert df["Símbolo"].tolist() == [65, 66]
    assert df["Código"].tolist() == ["0", "1"]
    assert df["Longitud"].tolist() == [1, 1]


def test_code_table_frame_columns():
    entries, code, _ = _ab()
    df = code_table_frame(entries, code)
    assert list(df.columns) == ["Símbolo", "Carácter", "Frecuencia", "Código", "Longitud"]


def test_metrics_csv(tmp_path):
    rows = [("Entrada", 0.5, 0.5, 1.0, 0.25, float("nan"))]
    df = save_metrics_csv(str(tmp_path), rows)
    assert (tmp_path / "resumen_metricas.csv").exists()
    assert df.loc[0, "Caso"] == "Entrada"
    assert df.loc[0, "Entropía [bits/bit]"] == pytest.approx(1.0)
