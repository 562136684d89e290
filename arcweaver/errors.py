#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArcWeaver v0.1.0

Error kinds raised by the conversion.

Fatal conditions are exceptions that propagate to the command-line layer,
which turns them into a message and an exit status. Non-integer average
abundances are not errors; they are described by AbundanceWarning records
that are logged and collected while the graph is written.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from dataclasses import dataclass
from typing import Optional


class ArcWeaverError(Exception):
    """Base class for fatal conversion errors."""
    exit_code = 1


class InputOutputError(ArcWeaverError):
    """Raised when the input cannot be read or the output cannot be created."""
    exit_code = 74


class FormatError(ArcWeaverError):
    """
    Raised when the input graph violates the bcalm2 format.

    Attributes:
        record_id: Written id of the offending unitig, if known
        record_number: 1-based position of the offending record, if known
    """
    exit_code = 65

    def __init__(self, message: str, record_id: Optional[int] = None,
                 record_number: Optional[int] = None):
        self.record_id = record_id
        self.record_number = record_number
        location = []
        if record_number is not None:
            location.append(f"record {record_number}")
        if record_id is not None:
            location.append(f"unitig {record_id}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


@dataclass(frozen=True)
class AbundanceWarning:
    """An arc whose total abundance is not a multiple of its k-mer count."""
    arc_id: int
    prefix: str
    total_abundance: int
    kmer_count: int

    @property
    def remainder(self) -> int:
        return self.total_abundance % self.kmer_count

    def __str__(self) -> str:
        return f"Found edge with non-integer average abundance: {self.prefix}"


__all__ = [
    'ArcWeaverError',
    'InputOutputError',
    'FormatError',
    'AbundanceWarning',
]

# ArcWeaver v0.1.0
# Any usage is subject to this software's license.
