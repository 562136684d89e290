#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
ArcWeaver v0.1.0

Arc-centric graph writer.

Output starts with the node count on its own line, followed by one line per
surviving arc, ordered by source node and then target node:

    canonical:  SRC TGT WEIGHT MIRROR_SRC MIRROR_TGT SEQUENCE
    legacy:     SRC TGT WEIGHT SEQUENCE
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, TextIO, Union

from arcweaver.assembly_core.arc_merger_module import (
    AbundanceCalculator,
    EdgeMerger,
    WeightedArc,
    iter_weighted_arcs,
    DEFAULT_PREFIX_PADDING,
)
from arcweaver.assembly_core.bigraph_module import Bigraph
from arcweaver.assembly_core.sequence_store import SequenceStore
from arcweaver.errors import AbundanceWarning, InputOutputError
from arcweaver.io.bcalm2_module import open_file, is_gzipped

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """Line layout of the arc-centric output."""
    CANONICAL = "canonical"
    LEGACY = "legacy"

    @classmethod
    def parse(cls, value: Union[str, 'OutputFormat']) -> 'OutputFormat':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ', '.join(f.value for f in cls)
            raise ValueError(f"Unknown output format {value!r} (expected one of: {valid})")


@dataclass
class WriteStats:
    """Summary of one write."""
    node_count: int = 0
    arc_lines: int = 0
    merged_pairs: int = 0
    warnings: List[AbundanceWarning] = field(default_factory=list)


def format_arc_line(arc: WeightedArc, sequence: str,
                    output_format: OutputFormat = OutputFormat.CANONICAL) -> str:
    """Render one arc line, including the trailing newline."""
    if output_format is OutputFormat.LEGACY:
        return f"{arc.source} {arc.target} {arc.weight} {sequence}\n"
    return (f"{arc.source} {arc.target} {arc.weight} "
            f"{arc.mirror_source} {arc.mirror_target} {sequence}\n")


def write_arc_centric_dbg(graph: Bigraph, sequence_store: SequenceStore, k: int,
                          output: TextIO,
                          output_format: Union[str, OutputFormat] = OutputFormat.CANONICAL,
                          warning_logger: Optional[logging.Logger] = None,
                          prefix_padding: int = DEFAULT_PREFIX_PADDING) -> WriteStats:
    """
    Write the arc-centric graph to a text stream.

    Args:
        graph: Graph built by BigraphBuilder
        sequence_store: Store holding the arc sequences
        k: k-mer size
        output: Text stream to write to
        output_format: 'canonical' (with mirror columns) or 'legacy'
        warning_logger: Logger receiving abundance and merge diagnostics
        prefix_padding: Bases beyond k shown in abundance warnings

    Returns:
        WriteStats for the written graph
    """
    output_format = OutputFormat.parse(output_format)
    merger = EdgeMerger(graph, sequence_store, logger=warning_logger)
    calculator = AbundanceCalculator(k, sequence_store, logger=warning_logger,
                                     prefix_padding=prefix_padding)

    output.write(f"{graph.node_count}\n")
    for arc in iter_weighted_arcs(graph, merger, calculator):
        sequence = sequence_store.render(arc.sequence_handle, arc.forwards)
        output.write(format_arc_line(arc, sequence, output_format))

    stats = WriteStats(
        node_count=graph.node_count,
        arc_lines=merger.stats.emitted_arcs,
        merged_pairs=merger.stats.merged_pairs,
        warnings=list(calculator.warnings),
    )
    logger.info(
        f"Wrote {stats.arc_lines} arcs on {stats.node_count} nodes "
        f"({stats.merged_pairs} self-complemental pairs merged, "
        f"{len(stats.warnings)} non-integer abundances)"
    )
    return stats


def write_arc_centric_dbg_file(graph: Bigraph, sequence_store: SequenceStore, k: int,
                               filepath: Union[str, Path],
                               output_format: Union[str, OutputFormat] = OutputFormat.CANONICAL,
                               atomic: bool = True,
                               warning_logger: Optional[logging.Logger] = None,
                               prefix_padding: int = DEFAULT_PREFIX_PADDING) -> WriteStats:
    """
    Write the arc-centric graph to a file (gzipped if the name ends in .gz).

    With atomic=True the graph is written to a temporary file next to the
    target and renamed onto it only after the write succeeded, so a failed
    run never leaves a file that looks complete.

    Raises:
        InputOutputError: If the output cannot be created or written
    """
    filepath = Path(filepath)

    if not atomic:
        try:
            with open_file(filepath, 'w') as handle:
                return write_arc_centric_dbg(graph, sequence_store, k, handle, output_format,
                                             warning_logger, prefix_padding)
        except OSError as e:
            raise InputOutputError(f"Cannot write output file {filepath}: {e}") from e

    # open_file picks compression by suffix, so the temporary file keeps the target's
    suffix = ".tmp" + filepath.suffix if is_gzipped(filepath) else ".tmp"
    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{filepath.name}.", suffix=suffix,
                                         dir=filepath.parent)
        os.close(fd)
        os.chmod(temp_name, 0o644)
    except OSError as e:
        raise InputOutputError(f"Cannot create output file {filepath}: {e}") from e

    temp_path = Path(temp_name)
    try:
        with open_file(temp_path, 'w') as handle:
            stats = write_arc_centric_dbg(graph, sequence_store, k, handle, output_format,
                                          warning_logger, prefix_padding)
        os.replace(temp_path, filepath)
    except OSError as e:
        raise InputOutputError(f"Cannot write output file {filepath}: {e}") from e
    finally:
        if temp_path.exists():
            temp_path.unlink()

    logger.debug(f"Moved finished output into place: {filepath}")
    return stats


__all__ = [
    'OutputFormat',
    'WriteStats',
    'format_arc_line',
    'write_arc_centric_dbg',
    'write_arc_centric_dbg_file',
]
