"""
Utilities module for ArcWeaver.

This module provides:
- DNA sequence helpers (2-bit codes, reverse complement, end (k-1)-mers)
- Memory usage reporting

The conversion pipeline lives in arcweaver.utils.pipeline.
"""

from .sequence_utils import (
    DNA_ALPHABET,
    encode_sequence,
    decode_codes,
    complement_code,
    reverse_complement,
    end_kmers,
)
from .memory_meter import MemoryMeter

__all__ = [
    'DNA_ALPHABET',
    'encode_sequence',
    'decode_codes',
    'complement_code',
    'reverse_complement',
    'end_kmers',
    'MemoryMeter',
]
