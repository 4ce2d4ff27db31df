from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .huffman import (
    EncodeStats,
    FrequencyEntry,
    Node,
    assign_codes,
    build_tree,
    count_frequencies,
    decode,
    encode,
    frequency_array,
)
from .bits_utils import bits_to_text, bytes_to_bits, bits_entropy_stats
from .container import pack, unpack
from .plot_utils import plot_frequencies, plot_code_lengths, plot_hist_bits
from .report import format_report, save_code_table_csv, save_metrics_csv, write_markdown

FORMATS = ("packed", "text")


@dataclass
class CoderParams:
    input_path: str
    output_path: str
    table_path: str = "table.txt"
    fmt: str = "packed"
    out_dir: Optional[str] = None


@dataclass
class CompressionResult:
    entries: List[FrequencyEntry]
    root: Node
    code: Dict[int, str]
    bits: np.ndarray
    stats: EncodeStats

    @property
    def counts(self) -> np.ndarray:
        return np.array([e.count for e in self.entries], dtype=np.int64)


def ensure_dirs(out_dir: str) -> str:
    os.makedirs(out_dir, exist_ok=True)
    figdir = os.path.join(out_dir, "figures")
    os.makedirs(figdir, exist_ok=True)
    return figdir


def run_pipeline(data) -> CompressionResult:
    # 1) Frecuencias -> 2) árbol -> 3) códigos -> 4) segunda pasada
    entries = count_frequencies(data)
    root = build_tree(entries)
    code = assign_codes(root)
    bits, stats = encode(data, code)
    return CompressionResult(entries, root, code, bits, stats)


def serialize(result: CompressionResult, fmt: str = "packed") -> bytes:
    if fmt == "packed":
        return pack(result.counts, result.bits)
    if fmt == "text":
        return bits_to_text(result.bits).encode("ascii")
    raise ValueError(f"Formato no soportado: {fmt} (use {' o '.join(FORMATS)})")


def decompress_bytes(blob: bytes) -> bytes:
    counts, bits = unpack(blob)
    entries = [FrequencyEntry(sym, int(c)) for sym, c in enumerate(counts)]
    data = decode(bits, build_tree(entries))
    # La cabecera guarda las frecuencias: la salida tiene que reproducirlas
    if len(data) != int(counts.sum()):
        raise ValueError(f"Payload corrupto: se decodificaron {len(data)} bytes, se esperaban {int(counts.sum())}")
    if not np.array_equal(frequency_array(data), counts):
        raise ValueError("Payload corrupto: las frecuencias decodificadas no coinciden con la cabecera")
    return data


def save_artifacts(result: CompressionResult, data: bytes, out_dir: str, fmt: str = "packed") -> Dict[str, str]:
    """CSV de tabla y métricas, figuras e informe Markdown en out_dir."""
    figdir = ensure_dirs(out_dir)
    paths = {
        "frequencies_png": os.path.join(figdir, "frecuencias.png"),
        "code_lengths_png": os.path.join(figdir, "longitudes_codigo.png"),
        "bits_in_png": os.path.join(figdir, "bits_hist_entrada.png"),
        "bits_huff_png": os.path.join(figdir, "bits_hist_huffman.png"),
        "code_table_csv": os.path.join(out_dir, "tabla_codigos.csv"),
        "metrics_csv": os.path.join(out_dir, "resumen_metricas.csv"),
        "markdown": os.path.join(out_dir, "informe.md"),
    }
    bits_in = bytes_to_bits(bytes(data), 8 * len(data))

    plot_frequencies(result.counts, "Frecuencia de símbolos", paths["frequencies_png"])
    plot_code_lengths(result.code, "Longitud de código por símbolo", paths["code_lengths_png"])
    plot_hist_bits(bits_in, "Histograma de bits (entrada)", paths["bits_in_png"])
    plot_hist_bits(result.bits, "Histograma de bits (Huffman)", paths["bits_huff_png"])

    p0, p1, H, var = bits_entropy_stats(bits_in)
    p0_h, p1_h, H_h, var_h = bits_entropy_stats(result.bits)
    rows = [
        ("Entrada", p0, p1, H, var, float("nan")),
        ("Huffman", p0_h, p1_h, H_h, var_h, result.stats.average_length),
    ]
    save_code_table_csv(out_dir, result.entries, result.code)
    save_metrics_csv(out_dir, rows)
    write_markdown(out_dir, result.stats, fmt=fmt)
    return paths


def compress_file(params: CoderParams) -> CompressionResult:
    with open(params.input_path, "rb") as f:
        data = f.read()

    # Si el pipeline falla no se escribe ningún archivo
    result = run_pipeline(data)
    payload = serialize(result, params.fmt)
    report = format_report(result.entries, result.code, result.stats)

    with open(params.output_path, "wb") as f:
        f.write(payload)
    if params.table_path:
        with open(params.table_path, "w", encoding="utf-8") as f:
            f.write(report)
    if params.out_dir:
        save_artifacts(result, data, params.out_dir, fmt=params.fmt)

    print(report)
    return result


def decompress_file(input_path: str, output_path: str) -> int:
    with open(input_path, "rb") as f:
        blob = f.read()
    data = decompress_bytes(blob)
    with open(output_path, "wb") as f:
        f.write(data)
    return len(data)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffpack", description="Compresión Huffman estática de bytes")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compress", help="Comprimir un archivo")
    c.add_argument("input", help="Archivo de entrada")
    c.add_argument("output", help="Archivo comprimido de salida")
    c.add_argument("--format", dest="fmt", choices=FORMATS, default="packed",
                   help="packed: 8 bits por byte; text: un carácter '0'/'1' por bit")
    c.add_argument("--table", default="table.txt", help="Ruta del informe de tabla y ahorro")
    c.add_argument("--out", default=None, help="Directorio para CSV, figuras e informe Markdown")

    d = sub.add_parser("decompress", help="Descomprimir un archivo packed")
    d.add_argument("input", help="Archivo comprimido")
    d.add_argument("output", help="Archivo restaurado")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "compress":
            params = CoderParams(
                input_path=args.input,
                output_path=args.output,
                table_path=args.table,
                fmt=args.fmt,
                out_dir=args.out,
            )
            compress_file(params)
            if params.out_dir:
                print(f"Listo. Salidas en: {params.out_dir}")
        else:
            n = decompress_file(args.input, args.output)
            print(f"Restaurados {n} bytes en: {args.output}")
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
