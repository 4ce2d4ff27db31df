import os
from typing import Dict, List

import pandas as pd

from .huffman import EncodeStats, FrequencyEntry
from .bits_utils import symbol_entropy


def _printable(sym: int) -> str:
    if 32 <= sym < 127:
        return repr(chr(sym))
    return f"0x{sym:02x}"


def format_report(entries: List[FrequencyEntry], code: Dict[int, str], stats: EncodeStats) -> str:
    """Tabla símbolo / frecuencia / código seguida del resumen de ahorro."""
    lines = []
    for e in entries:
        if e.count == 0:
            continue
        lines.append(
            f"Símbolo: {e.symbol:3d} {_printable(e.symbol):>6}  "
            f"Frecuencia: {e.count}  Código: {code[e.symbol]}"
        )

    H = symbol_entropy([e.count for e in entries])
    lines += [
        "",
        "Ahorro según tamaño de archivo",
        f"Tamaño original: {stats.input_bits} bits",
        f"Tamaño de salida: {stats.output_bits} bits",
        f"La salida ocupa el {stats.size_percent:.4f}% del original",
        f"Es {stats.times_smaller:.4f} veces más pequeña",
        "",
        "Ahorro según longitud media de código",
        f"Dígitos binarios en la salida: {stats.output_bits}",
        f"Símbolos codificados: {stats.symbols}",
        f"Longitud media: {stats.average_length:.6f} bits/símbolo",
        f"Compresión 1 - {stats.average_length:.6f}/8 = {stats.compression_percent:.4f}%",
        f"Entropía de la fuente: {H:.6f} bits/símbolo "
        f"(eficiencia {H / stats.average_length * 100:.2f}%)",
    ]
    return "\n".join(lines) + "\n"


def code_table_frame(entries: List[FrequencyEntry], code: Dict[int, str]) -> pd.DataFrame:
    rows = [
        (e.symbol, _printable(e.symbol), e.count, code[e.symbol], len(code[e.symbol]))
        for e in entries if e.count > 0
    ]
    return pd.DataFrame(rows, columns=["Símbolo", "Carácter", "Frecuencia", "Código", "Longitud"])


def save_code_table_csv(out_dir: str, entries: List[FrequencyEntry], code: Dict[int, str]):
    df = code_table_frame(entries, code)
    df.to_csv(os.path.join(out_dir, "tabla_codigos.csv"), index=False)
    return df


def save_metrics_csv(out_dir: str, rows):
    df = pd.DataFrame(
        rows,
        columns=[
            "Caso",
            "P(0)",
            "P(1)",
            "Entropía [bits/bit]",
            "Varianza bits",
            "Longitud media (Huffman)",
        ],
    )
    df.to_csv(os.path.join(out_dir, "resumen_metricas.csv"), index=False)
    return df


def write_markdown(out_dir: str, stats: EncodeStats, fmt: str = "packed"):
    md = f"""# Compresión Huffman estática

## 1) Frecuencias de la entrada
![frecuencias](figures/frecuencias.png)

## 2) Longitud de código por símbolo
![longitudes](figures/longitudes_codigo.png)

## 3) Histogramas de bits
- Entrada: ![bits_entrada](figures/bits_hist_entrada.png)
- Huffman: ![bits_huffman](figures/bits_hist_huffman.png)

## 4) Resumen
| Métrica | Valor |
|---|---|
| Bits de entrada | {stats.input_bits} |
| Bits de salida | {stats.output_bits} |
| Razón salida/entrada | {stats.ratio:.4f} |
| Longitud media | {stats.average_length:.4f} bits/símbolo |
| Compresión (1 - L/8) | {stats.compression_percent:.2f}% |

Tabla completa en **tabla_codigos.csv**, métricas de bits en **resumen_metricas.csv**.

**Notas**
- Formato de salida: `{fmt}`. Con `text` cada bit ocupa un carácter ASCII, así que
  el archivo no es más pequeño que la entrada; solo la longitud media refleja la compresión.
"""
    with open(os.path.join(out_dir, "informe.md"), "w", encoding="utf-8") as f:
        f.write(md)
