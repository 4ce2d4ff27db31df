import numpy as np
import math
from typing import Tuple

from scipy.stats import entropy


def bits_to_bytes(bits) -> bytes:
    """Empaqueta bits (MSB primero) en bytes, rellenando con ceros el último."""
    arr = np.asarray(bits, dtype=np.uint8)
    return np.packbits(arr).tobytes()


def bytes_to_bits(data: bytes, n_bits: int) -> np.ndarray:
    arr = np.frombuffer(data, dtype=np.uint8)
    if n_bits > arr.size * 8:
        raise ValueError(f"Se piden {n_bits} bits pero solo hay {arr.size * 8}")
    return np.unpackbits(arr)[:n_bits]


def bits_to_text(bits) -> str:
    """Forma textual heredada: un carácter '0'/'1' por bit."""
    arr = np.asarray(bits, dtype=np.uint8)
    return (arr + ord("0")).tobytes().decode("ascii")


def bits_entropy_stats(bits) -> Tuple[float, float, float, float]:
    """
    Calcula métricas del flujo de bits:
    - p0: probabilidad de 0
    - p1: probabilidad de 1
    - H: entropía (bits/bit)
    - var: varianza sobre {0,1}
    """
    arr = np.array(bits, dtype=np.uint8)
    if arr.size == 0:
        return float("nan"), float("nan"), 0.0, 0.0
    p1 = arr.mean()
    p0 = 1 - p1

    def hb(p):
        if p <= 0 or p >= 1:
            return 0.0
        return -p * math.log2(p) - (1 - p) * math.log2(1 - p)

    H = hb(p1)
    var = arr.var()
    return float(p0), float(p1), H, float(var)


def symbol_entropy(counts) -> float:
    """Entropía de Shannon de la distribución de símbolos (bits/símbolo)."""
    counts = np.asarray(counts, dtype=np.float64)
    if counts.sum() <= 0:
        return 0.0
    return float(entropy(counts, base=2))
