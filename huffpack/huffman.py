from __future__ import annotations

from dataclasses import dataclass
from heapq import heapify, heappush, heappop
from typing import Dict, Iterable, List, Union

import numpy as np

N_SYMBOLS = 256
BITS_PER_SYMBOL = 8


class EmptyInputError(ValueError):
    """No hay ningún símbolo con frecuencia > 0."""


class UnknownSymbolError(ValueError):
    """Un símbolo de la entrada no tiene código en la tabla."""

    def __init__(self, symbol: int, position: int):
        super().__init__(f"Símbolo {symbol} (posición {position}) no está en la tabla de códigos")
        self.symbol = symbol
        self.position = position


@dataclass(frozen=True)
class FrequencyEntry:
    symbol: int
    count: int


@dataclass(frozen=True)
class Leaf:
    symbol: int
    weight: int


@dataclass(frozen=True)
class Internal:
    left: "Node"
    right: "Node"
    weight: int


Node = Union[Leaf, Internal]


def as_symbols(data) -> np.ndarray:
    """
    Convierte la entrada en un array de símbolos. Bytes y arrays uint8 se
    quedan en uint8 (sin copia); el resto pasa a int64.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.uint8)
    if isinstance(data, np.ndarray):
        if data.dtype == np.uint8:
            return data.ravel()
        return data.astype(np.int64).ravel()
    return np.fromiter((int(v) for v in data), dtype=np.int64)


def frequency_array(data) -> np.ndarray:
    """Cuenta ocurrencias de cada byte 0..255 (valores fuera de rango se ignoran)."""
    s = as_symbols(data)
    s = s[(s >= 0) & (s < N_SYMBOLS)]
    return np.bincount(s, minlength=N_SYMBOLS).astype(np.int64)


def count_frequencies(data) -> List[FrequencyEntry]:
    """
    Primera pasada: tabla de 256 entradas (símbolo, frecuencia), ordenada
    por valor de símbolo e incluyendo las de frecuencia 0.
    """
    counts = frequency_array(data)
    return [FrequencyEntry(sym, int(c)) for sym, c in enumerate(counts)]


def build_tree(frequencies: Iterable[FrequencyEntry]) -> Node:
    """
    Construye el árbol de Huffman a partir de la tabla de frecuencias.

    Las entradas con frecuencia 0 no reciben hoja. Desempate estable: a igual
    peso sale antes el nodo insertado antes (para hojas, el símbolo menor), y
    el primero que sale queda a la izquierda.
    """
    leaves = sorted(
        (Leaf(e.symbol, e.count) for e in frequencies if e.count > 0),
        key=lambda n: (n.weight, n.symbol),
    )
    if not leaves:
        raise EmptyInputError("La entrada está vacía: no hay símbolos que codificar")

    # Caso degenerado: un único símbolo, el árbol es la propia hoja
    if len(leaves) == 1:
        return leaves[0]

    # (peso, orden de inserción, nodo); el orden evita comparar nodos
    heap = [(leaf.weight, order, leaf) for order, leaf in enumerate(leaves)]
    heapify(heap)
    order = len(heap)
    while len(heap) > 1:
        _, _, a = heappop(heap)
        _, _, b = heappop(heap)
        merged = Internal(a, b, a.weight + b.weight)
        heappush(heap, (merged.weight, order, merged))
        order += 1

    return heap[0][2]


def assign_codes(root: Node) -> Dict[int, str]:
    """Recorre el árbol en preorden: '0' a la izquierda, '1' a la derecha."""
    if isinstance(root, Leaf):
        # Un código de longitud 0 no es válido
        return {root.symbol: "0"}

    code: Dict[int, str] = {}

    def walk(n: Node, prefix: str):
        if isinstance(n, Leaf):
            code[n.symbol] = prefix
            return
        walk(n.left, prefix + "0")
        walk(n.right, prefix + "1")

    walk(root, "")
    return code


def build_code(data):
    """
    Atajo de las tres primeras etapas.
    Devuelve:
      - entries: lista de 256 FrequencyEntry
      - root: raíz del árbol
      - code: dict {simbolo: 'cadena_de_bits'}
    """
    entries = count_frequencies(data)
    root = build_tree(entries)
    return entries, root, assign_codes(root)


@dataclass(frozen=True)
class EncodeStats:
    symbols: int
    input_bits: int
    output_bits: int
    average_length: float

    @property
    def ratio(self) -> float:
        return self.output_bits / self.input_bits

    @property
    def size_percent(self) -> float:
        return self.ratio * 100

    @property
    def times_smaller(self) -> float:
        return self.input_bits / self.output_bits

    @property
    def compression_percent(self) -> float:
        return (1 - self.average_length / BITS_PER_SYMBOL) * 100

    def as_dict(self) -> dict:
        return {
            "symbols": self.symbols,
            "input_bits": self.input_bits,
            "output_bits": self.output_bits,
            "ratio": self.ratio,
            "size_percent": self.size_percent,
            "times_smaller": self.times_smaller,
            "average_length": self.average_length,
            "compression_percent": self.compression_percent,
        }


def _code_lut(code: Dict[int, str]):
    # Bits de todos los códigos concatenados, con offset y longitud por símbolo
    lengths = np.zeros(N_SYMBOLS, dtype=np.int64)
    offsets = np.zeros(N_SYMBOLS, dtype=np.int64)
    pos = 0
    for sym in sorted(code):
        offsets[sym] = pos
        lengths[sym] = len(code[sym])
        pos += len(code[sym])
    joined = "".join(code[sym] for sym in sorted(code))
    flat = np.frombuffer(joined.encode("ascii"), dtype=np.uint8) - ord("0")
    return flat, offsets, lengths


def encode(data, code: Dict[int, str]):
    """
    Segunda pasada: codifica 'data' con la tabla 'code'.
    Devuelve:
      - out_bits: np.ndarray uint8 con los bits (0/1) en el orden de la entrada
      - stats: EncodeStats con tamaños, razón y longitud media
    """
    symbols = as_symbols(data)
    if symbols.size == 0:
        raise EmptyInputError("La entrada está vacía: no hay símbolos que codificar")
    if not code:
        raise UnknownSymbolError(int(symbols[0]), 0)

    flat, offsets, len_lut = _code_lut(code)
    if symbols.dtype == np.uint8:
        lengths = len_lut[symbols]
    else:
        in_range = (symbols >= 0) & (symbols < N_SYMBOLS)
        lengths = np.zeros(symbols.size, dtype=np.int64)
        lengths[in_range] = len_lut[symbols[in_range]]
    missing = np.flatnonzero(lengths == 0)
    if missing.size:
        pos = int(missing[0])
        raise UnknownSymbolError(int(symbols[pos]), pos)

    ends = np.cumsum(lengths)
    output_bits = int(ends[-1])
    # Índice en 'flat' del bit k: offset del código + (k - inicio del símbolo)
    idx = np.repeat(offsets[symbols] - (ends - lengths), lengths)
    idx += np.arange(output_bits, dtype=np.int64)
    out_bits = flat[idx]

    total = int(symbols.size)
    stats = EncodeStats(
        symbols=total,
        input_bits=BITS_PER_SYMBOL * total,
        output_bits=output_bits,
        average_length=output_bits / total,
    )
    return out_bits, stats


def decode(bits, root: Node) -> bytes:
    """Decodifica recorriendo el árbol desde la raíz por cada código."""
    if isinstance(root, Leaf):
        # El único código válido es "0"
        if np.any(np.asarray(bits, dtype=np.uint8) != 0):
            raise ValueError("Bit 1 en un flujo de un único símbolo (código '0')")
        return bytes([root.symbol]) * len(bits)

    out = bytearray()
    node = root
    for b in bits:
        node = node.right if int(b) else node.left
        if isinstance(node, Leaf):
            out.append(node.symbol)
            node = root
    if node is not root:
        raise ValueError("Flujo de bits truncado: termina a mitad de un código")
    return bytes(out)
