#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
ArcWeaver v0.1.0

bcalm2 unitig file reader.

A bcalm2 file is FASTA-like: every record is a header line

    >ID LN:i:LENGTH KC:i:TOTAL_ABUNDANCE km:f:MEAN_ABUNDANCE [L:+:ID:-]...

followed by the unitig sequence. Each L tag states that the end of this
unitig with the first polarity overlaps the end of the target unitig
with the second polarity by k-1 bases.
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Set, TextIO, Tuple, Union

from Bio.SeqIO.FastaIO import SimpleFastaParser

from arcweaver.errors import FormatError, InputOutputError

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 2: RECORD DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class LinkEndpoint:
    """
    One L tag of a unitig header.

    Attributes:
        my_polarity: '+' links the end of the unitig read forwards (its tail),
            '-' the end of its reverse complement (its head)
        target_id: Written id of the linked unitig
        target_polarity: '+' if the target is entered forwards (at its
            head), '-' if it is entered as its reverse complement
    """
    my_polarity: str
    target_id: int
    target_polarity: str

    @property
    def forwards(self) -> bool:
        return self.my_polarity == '+'

    @property
    def target_forwards(self) -> bool:
        return self.target_polarity == '+'

    def __str__(self) -> str:
        return f"L:{self.my_polarity}:{self.target_id}:{self.target_polarity}"


@dataclass
class UnitigRecord:
    """
    A parsed bcalm2 unitig.

    Attributes:
        id: Written unitig id
        length: Length in bases (LN tag)
        total_abundance: Sum of k-mer counts (KC tag)
        mean_abundance: Average k-mer count (km tag), informational only
        sequence: Upper-case DNA sequence
        links: Link endpoints in header order
        record_number: 1-based position of the record in the input
    """
    id: int
    length: int
    total_abundance: int
    mean_abundance: float
    sequence: str
    links: List[LinkEndpoint] = field(default_factory=list)
    record_number: int = 0

    def __len__(self) -> int:
        return self.length

    def kmer_count(self, k: int) -> int:
        """Number of k-mers in the unitig."""
        return self.length - (k - 1)


# =============================================================================
# SECTION 3: HEADER PARSING
# =============================================================================

_INT_TAG = re.compile(r'(LN|KC):i:(-?\d+)')
_FLOAT_TAG = re.compile(r'km:f:([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)')
_LINK_TAG = re.compile(r'L:([+-]):(\d+):([+-])')
_GENERIC_TAG = re.compile(r'[A-Za-z][A-Za-z0-9]:[AifZJHB]:.*')


def parse_header(title: str, record_number: int = 0) -> Tuple[int, int, int, float, List[LinkEndpoint]]:
    """
    Parse a bcalm2 header line (without the leading '>').

    Args:
        title: Header text
        record_number: Position of the record, for error messages

    Returns:
        Tuple of (id, length, total_abundance, mean_abundance, links)

    Raises:
        FormatError: If the id is missing or a tag is malformed or missing
    """
    fields = title.split()
    if not fields:
        raise FormatError("Missing unitig id in header", record_number=record_number)

    try:
        unitig_id = int(fields[0])
    except ValueError:
        raise FormatError(f"Unitig id is not an integer: {fields[0]!r}",
                          record_number=record_number)
    if unitig_id < 0:
        raise FormatError(f"Unitig id is negative: {unitig_id}",
                          record_number=record_number)

    length = None
    total_abundance = None
    mean_abundance = None
    links = []

    for tag in fields[1:]:
        if tag.startswith('L:'):
            match = _LINK_TAG.fullmatch(tag)
            if not match:
                raise FormatError(f"Malformed link tag: {tag!r}",
                                  record_id=unitig_id, record_number=record_number)
            links.append(LinkEndpoint(match.group(1), int(match.group(2)), match.group(3)))
            continue

        match = _INT_TAG.fullmatch(tag)
        if match:
            value = int(match.group(2))
            if value < 0:
                raise FormatError(f"Negative value in tag: {tag!r}",
                                  record_id=unitig_id, record_number=record_number)
            if (length if match.group(1) == 'LN' else total_abundance) is not None:
                raise FormatError(f"Duplicate {match.group(1)} tag",
                                  record_id=unitig_id, record_number=record_number)
            if match.group(1) == 'LN':
                length = value
            else:
                total_abundance = value
            continue

        match = _FLOAT_TAG.fullmatch(tag)
        if match:
            if mean_abundance is not None:
                raise FormatError("Duplicate km tag",
                                  record_id=unitig_id, record_number=record_number)
            mean_abundance = float(match.group(1))
            continue

        if tag[:3] in ('LN:', 'KC:', 'km:') or not _GENERIC_TAG.fullmatch(tag):
            raise FormatError(f"Malformed tag: {tag!r}",
                              record_id=unitig_id, record_number=record_number)
        logger.debug(f"Ignoring unknown tag {tag!r} of unitig {unitig_id}")

    for name, value in (('LN', length), ('KC', total_abundance), ('km', mean_abundance)):
        if value is None:
            raise FormatError(f"Missing {name} tag",
                              record_id=unitig_id, record_number=record_number)

    return unitig_id, length, total_abundance, mean_abundance, links


# =============================================================================
# SECTION 4: RECORD PARSING
# =============================================================================

def _checked_lines(handle: Iterable[str]) -> Iterator[str]:
    """
    Pass input lines through, rejecting text before the first header line
    and bytes that do not decode.

    Raises:
        FormatError: If the first non-blank line is not a '>' header or the
            stream is not valid text
    """
    headers_seen = 0
    try:
        for line in handle:
            if line.startswith('>'):
                headers_seen += 1
            elif not headers_seen and line.strip():
                raise FormatError("Expected '>' header", record_number=1)
            yield line
    except UnicodeDecodeError as e:
        # Decoding runs ahead in chunks, so the record is the last one started
        raise FormatError(f"Input is not valid text: {e}",
                          record_number=headers_seen or None) from e


def iter_bcalm2_records(handle: Iterable[str]) -> Iterator[UnitigRecord]:
    """
    Parse bcalm2 records from a text stream.

    Records are yielded in input order. Ids are checked for uniqueness but
    not for order.

    Args:
        handle: Text stream (or any iterable of lines)

    Yields:
        UnitigRecord objects

    Raises:
        FormatError: On any structural problem in the input
    """
    seen_ids: Set[int] = set()

    records = SimpleFastaParser(_checked_lines(handle))
    for record_number, (title, sequence) in enumerate(records, start=1):
        unitig_id, length, total_abundance, mean_abundance, links = parse_header(
            title, record_number
        )

        if unitig_id in seen_ids:
            raise FormatError(f"Duplicate unitig id {unitig_id}",
                              record_id=unitig_id, record_number=record_number)
        seen_ids.add(unitig_id)

        if len(sequence) != length:
            raise FormatError(
                f"Sequence length {len(sequence)} does not match LN:i:{length}",
                record_id=unitig_id, record_number=record_number
            )

        yield UnitigRecord(
            id=unitig_id,
            length=length,
            total_abundance=total_abundance,
            mean_abundance=mean_abundance,
            sequence=sequence.upper(),
            links=links,
            record_number=record_number,
        )


def read_bcalm2(handle: Iterable[str]) -> List[UnitigRecord]:
    """
    Read a complete bcalm2 graph into memory.

    Args:
        handle: Text stream

    Returns:
        List of UnitigRecord objects in input order
    """
    records = list(iter_bcalm2_records(handle))
    link_count = sum(len(record.links) for record in records)
    logger.info(f"Read {len(records)} unitigs with {link_count} link tags")
    return records


# =============================================================================
# SECTION 5: FILE UTILITIES
# =============================================================================
# Helper functions for file handling with automatic gzip detection

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """
    Check if file is gzip compressed.

    Args:
        filepath: Path to file

    Returns:
        True if file is gzipped
    """
    filepath = Path(filepath)
    return filepath.suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w'), always text in UTF-8

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt', encoding='utf-8')
        else:
            return gzip.open(filepath, 'wt', encoding='utf-8')
    else:
        return open(filepath, mode, encoding='utf-8')


def read_bcalm2_file(filepath: Union[str, Path]) -> List[UnitigRecord]:
    """
    Read a bcalm2 file (can be gzipped).

    Raises:
        InputOutputError: If the file cannot be opened or read
        FormatError: If the file content is malformed
    """
    filepath = Path(filepath)

    try:
        handle = open_file(filepath, 'r')
    except OSError as e:
        raise InputOutputError(f"Cannot open input file {filepath}: {e}") from e

    try:
        return read_bcalm2(handle)
    except OSError as e:
        raise InputOutputError(f"Cannot read input file {filepath}: {e}") from e
    finally:
        handle.close()


__all__ = [
    'LinkEndpoint',
    'UnitigRecord',
    'parse_header',
    'iter_bcalm2_records',
    'read_bcalm2',
    'read_bcalm2_file',
    'open_file',
    'is_gzipped',
]
