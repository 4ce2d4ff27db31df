"""Formato persistido del flujo comprimido (bits empaquetados 8 por byte).

Estructura (little endian):
    magic   4 bytes  b"HUFP"
    version uint8
    n_bits  uint64   bits útiles del payload
    n       uint16   entradas de la tabla de frecuencias
    n x (symbol uint8, count uint64)
    payload          bits empaquetados MSB primero, con relleno a 0

La tabla guarda frecuencias y no códigos: la construcción del árbol es
determinista, así que el decodificador reconstruye el mismo árbol.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np

from .bits_utils import bits_to_bytes, bytes_to_bits
from .huffman import N_SYMBOLS

MAGIC = b"HUFP"
VERSION = 1

_HEADER = np.dtype([("version", "u1"), ("n_bits", "<u8"), ("n_entries", "<u2")])
_ENTRY = np.dtype([("symbol", "u1"), ("count", "<u8")])


def pack(counts: np.ndarray, bits) -> bytes:
    counts = np.asarray(counts, dtype=np.int64)
    if counts.size != N_SYMBOLS:
        raise ValueError(f"Se esperaban {N_SYMBOLS} frecuencias, hay {counts.size}")
    bits = np.asarray(bits, dtype=np.uint8)

    used = np.flatnonzero(counts > 0)
    header = np.zeros(1, dtype=_HEADER)
    header["version"] = VERSION
    header["n_bits"] = bits.size
    header["n_entries"] = used.size
    table = np.zeros(used.size, dtype=_ENTRY)
    table["symbol"] = used
    table["count"] = counts[used]
    return MAGIC + header.tobytes() + table.tobytes() + bits_to_bytes(bits)


def unpack(blob: bytes) -> Tuple[np.ndarray, np.ndarray]:
    """Devuelve (counts[256], bits) a partir de un archivo empaquetado."""
    if blob[:len(MAGIC)] != MAGIC:
        raise ValueError("No es un archivo huffpack (magic inválido)")
    pos = len(MAGIC)
    if len(blob) < pos + _HEADER.itemsize:
        raise ValueError("Cabecera truncada")
    header = np.frombuffer(blob, dtype=_HEADER, count=1, offset=pos)[0]
    pos += _HEADER.itemsize
    if int(header["version"]) != VERSION:
        raise ValueError(f"Versión no soportada: {int(header['version'])}")

    n_entries = int(header["n_entries"])
    if len(blob) < pos + n_entries * _ENTRY.itemsize:
        raise ValueError("Tabla de frecuencias truncada")
    table = np.frombuffer(blob, dtype=_ENTRY, count=n_entries, offset=pos)
    pos += n_entries * _ENTRY.itemsize

    counts = np.zeros(N_SYMBOLS, dtype=np.int64)
    counts[table["symbol"]] = table["count"].astype(np.int64)

    n_bits = int(header["n_bits"])
    payload = blob[pos:]
    if len(payload) != (n_bits + 7) // 8:
        raise ValueError(f"Payload truncado: se esperaban {(n_bits + 7) // 8} bytes, hay {len(payload)}")
    return counts, bytes_to_bits(payload, n_bits)
