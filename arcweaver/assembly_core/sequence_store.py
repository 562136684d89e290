#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ArcWeaver v0.1.0

Interning store for unitig sequences.

Sequences are kept once, 2-bit coded in numpy arrays, and addressed by
integer handles. Arcs only carry handles; the reverse-complement
orientation of a sequence is never materialised, it is read through a
lazy view instead.
"""

from typing import Dict, Iterator, List, NewType

import numpy as np

from arcweaver.utils.sequence_utils import encode_sequence, decode_codes

SequenceHandle = NewType('SequenceHandle', int)


class ReverseComplementView:
    """
    Lazy reverse complement of a stored sequence.

    Iterating yields complemented base codes back-to-front without copying
    the underlying array. The view is restartable: every iteration starts
    from the last base again.
    """

    __slots__ = ('_codes',)

    def __init__(self, codes: np.ndarray):
        self._codes = codes

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self) -> Iterator[int]:
        codes = self._codes
        for index in range(len(codes) - 1, -1, -1):
            yield 3 - int(codes[index])

    def __str__(self) -> str:
        return decode_codes(3 - self._codes[::-1])

    def __repr__(self) -> str:
        return f"ReverseComplementView(length={len(self)})"


class SequenceStore:
    """
    Interns DNA sequences by handle.

    Storing the same content twice returns the same handle, so handle
    equality implies identical content and vice versa.
    """

    def __init__(self):
        self._sequences: List[np.ndarray] = []
        self._handles: Dict[bytes, SequenceHandle] = {}

    def __len__(self) -> int:
        return len(self._sequences)

    def store(self, sequence: str) -> SequenceHandle:
        """
        Intern a sequence.

        Args:
            sequence: DNA sequence over {A,C,G,T}

        Returns:
            Handle of the stored sequence

        Raises:
            ValueError: If the sequence contains non-DNA symbols
        """
        codes = encode_sequence(sequence)
        key = codes.tobytes()
        handle = self._handles.get(key)
        if handle is None:
            handle = SequenceHandle(len(self._sequences))
            self._sequences.append(codes)
            self._handles[key] = handle
        return handle

    def get(self, handle: SequenceHandle) -> np.ndarray:
        """Return the read-only code array of a stored sequence."""
        return self._sequences[handle]

    def sequence_length(self, handle: SequenceHandle) -> int:
        return len(self._sequences[handle])

    def reverse_complement_view(self, handle: SequenceHandle) -> ReverseComplementView:
        """Return a lazy reverse-complement view of a stored sequence."""
        return ReverseComplementView(self._sequences[handle])

    def render(self, handle: SequenceHandle, forwards: bool = True) -> str:
        """
        Render a stored sequence as text.

        Args:
            handle: Sequence handle
            forwards: Render as stored if True, as reverse complement otherwise
        """
        if forwards:
            return decode_codes(self._sequences[handle])
        return str(self.reverse_complement_view(handle))

    def total_bases(self) -> int:
        return sum(len(codes) for codes in self._sequences)
