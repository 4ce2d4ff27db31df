import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Dict


def plot_frequencies(counts, title: str, fname: str):
    """Frecuencia de cada símbolo presente (una figura, sin estilos de color explícitos)."""
    counts = np.asarray(counts)
    used = np.flatnonzero(counts > 0)
    plt.figure()
    plt.bar(used, counts[used])
    plt.xlim(-1, 256)
    plt.xlabel('Símbolo (byte)')
    plt.ylabel('Frecuencia')
    plt.title(title)
    plt.tight_layout()
    plt.savefig(fname, dpi=140)
    plt.close()


def plot_code_lengths(code: Dict[int, str], title: str, fname: str):
    syms = sorted(code)
    plt.figure()
    plt.bar(syms, [len(code[s]) for s in syms])
    plt.axhline(8, color='gray', lw=0.6)
    plt.xlim(-1, 256)
    plt.xlabel('Símbolo (byte)')
    plt.ylabel('Longitud de código [bits]')
    plt.title(title)
    plt.tight_layout()
    plt.savefig(fname, dpi=140)
    plt.close()


def plot_hist_bits(bits, title, fname):
    """Histograma de bits (conteo de 0/1)."""
    bits = np.array(bits, dtype=np.uint8)
    counts = [np.sum(bits == 0), np.sum(bits == 1)]
    plt.figure()
    plt.bar([0, 1], counts)
    plt.xticks([0, 1], ['0', '1'])
    plt.xlabel('Bit')
    plt.ylabel('Frecuencia')
    plt.title(title)
    plt.tight_layout()
    plt.savefig(fname, dpi=140)
    plt.close()
