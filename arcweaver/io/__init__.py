"""
ArcWeaver v0.1.0

I/O Module for ArcWeaver.

Module structure:
1. bcalm2_module.py - bcalm2 unitig records, parsing, gzip-aware file opening
2. arc_writer_module.py - Arc-centric graph output (canonical/legacy, atomic)
"""

from .bcalm2_module import (
    LinkEndpoint,
    UnitigRecord,
    parse_header,
    iter_bcalm2_records,
    read_bcalm2,
    read_bcalm2_file,
    open_file,
    is_gzipped,
)

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
