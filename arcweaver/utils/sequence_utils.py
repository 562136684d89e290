"""
ArcWeaver v0.1.0

Sequence utility functions for ArcWeaver.

Provides the 4-symbol DNA codec used by the sequence store and the
string-level reverse complement used for (k-1)-mer bookkeeping.
"""

from typing import Tuple

import numpy as np


DNA_ALPHABET = "ACGT"

# Code of a base is its index in DNA_ALPHABET, so the complement of code c is 3 - c.
_DECODE_TABLE = np.frombuffer(DNA_ALPHABET.encode('ascii'), dtype=np.uint8)
_INVALID_CODE = 255
_ENCODE_TABLE = np.full(256, _INVALID_CODE, dtype=np.uint8)
for _code, _base in enumerate(DNA_ALPHABET):
    _ENCODE_TABLE[ord(_base)] = _code
    _ENCODE_TABLE[ord(_base.lower())] = _code

_COMPLEMENT_MAP = {
    'A': 'T', 'T': 'A',
    'G': 'C', 'C': 'G',
}


def encode_sequence(sequence: str) -> np.ndarray:
    """
    Encode a DNA string as an array of 2-bit base codes.

    Args:
        sequence: DNA sequence over {A,C,G,T} (case-insensitive)

    Returns:
        Read-only uint8 array of codes in 0..3

    Raises:
        ValueError: If the sequence contains a symbol outside the alphabet

    Example:
        >>> encode_sequence("ACGT").tolist()
        [0, 1, 2, 3]
    """
    try:
        raw = np.frombuffer(sequence.encode('ascii'), dtype=np.uint8)
    except UnicodeEncodeError:
        raise ValueError(f"Non-ASCII symbol in DNA sequence: {sequence[:20]!r}")

    codes = _ENCODE_TABLE[raw]
    invalid = np.flatnonzero(codes == _INVALID_CODE)
    if invalid.size:
        position = int(invalid[0])
        raise ValueError(
            f"Invalid DNA symbol {sequence[position]!r} at position {position}"
        )

    codes.setflags(write=False)
    return codes


def decode_codes(codes: np.ndarray) -> str:
    """Render an array of base codes as an upper-case DNA string."""
    return _DECODE_TABLE[codes].tobytes().decode('ascii')


def complement_code(code: int) -> int:
    """Complement of a single base code."""
    return 3 - code


def reverse_complement(sequence: str) -> str:
    """
    Generate reverse complement of DNA sequence.

    Args:
        sequence: DNA sequence string

    Returns:
        Reverse complement sequence

    Example:
        >>> reverse_complement("ATCG")
        'CGAT'
    """
    return ''.join(_COMPLEMENT_MAP[base] for base in reversed(sequence.upper()))


def end_kmers(sequence: str, k: int) -> Tuple[str, str]:
    """
    Return the first and last (k-1)-mer of a unitig.

    Example:
        >>> end_kmers("ATCGATCG", 4)
        ('ATC', 'TCG')
    """
    overlap = k - 1
    return sequence[:overlap], sequence[len(sequence) - overlap:]


__all__ = [
    'DNA_ALPHABET',
    'encode_sequence',
    'decode_codes',
    'complement_code',
    'reverse_complement',
    'end_kmers',
]
