"""
ArcWeaver conversion pipeline.

Ties the stages together:
- Reading: bcalm2 unitigs (plain or gzipped)
- Building: arc-centric bigraph with mirror pairing
- Writing: merged, weighted arcs in canonical or legacy layout

node_to_arc_centric_dbg() works on text streams; ConversionPipeline adds
configuration, file handling, atomic output and memory reports.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List, TextIO, Union
from dataclasses import dataclass, field, asdict
import logging

from ..assembly_core.arc_merger_module import DEFAULT_PREFIX_PADDING
from ..assembly_core.bigraph_module import BigraphBuilder
from ..assembly_core.sequence_store import SequenceStore
from ..errors import AbundanceWarning
from ..io.arc_writer_module import (
    OutputFormat,
    WriteStats,
    write_arc_centric_dbg,
    write_arc_centric_dbg_file,
)
from ..io.bcalm2_module import read_bcalm2, read_bcalm2_file
from .memory_meter import MemoryMeter

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# ============================================================================
# Logging Setup
# ============================================================================

def parse_log_level(level: Union[str, int]) -> int:
    """
    Resolve a log level name case-insensitively ('Info', 'info', 'INFO').

    Raises:
        ValueError: If the name is not a known level
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(level: Union[str, int] = 'INFO', log_file: Optional[Path] = None):
    """
    Configure process-wide logging: stderr, plus a log file if given.

    Args:
        level: Log level name or number
        log_file: Optional path of an additional log file
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=parse_log_level(level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


# ============================================================================
# Data Structures
# ============================================================================

@dataclass
class ConversionConfig:
    """Parameters of one conversion."""
    k: int
    output_format: OutputFormat = OutputFormat.CANONICAL
    warning_prefix_padding: int = DEFAULT_PREFIX_PADDING

    def __post_init__(self):
        if isinstance(self.k, bool) or not isinstance(self.k, int):
            raise ValueError(f"k must be an integer, got {self.k!r}")
        if self.k < 2:
            raise ValueError(f"k must be >= 2, got {self.k}")
        self.output_format = OutputFormat.parse(self.output_format)
        if self.warning_prefix_padding < 0:
            raise ValueError(
                f"warning_prefix_padding must be >= 0, got {self.warning_prefix_padding}"
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ConversionConfig':
        """Build from the 'conversion' section of a configuration dictionary."""
        conversion = config.get('conversion', {})
        k = conversion.get('kmer_size')
        if k is None:
            raise ValueError("k-mer size is required")
        return cls(
            k=k,
            output_format=conversion.get('output_format', OutputFormat.CANONICAL),
            warning_prefix_padding=conversion.get('warning_prefix_padding',
                                                  DEFAULT_PREFIX_PADDING),
        )


@dataclass
class ConversionStats:
    """Statistics from a conversion run."""
    unitigs: int = 0
    nodes: int = 0
    arcs: int = 0                        # Before merging, two per unitig
    arc_lines: int = 0                   # Written after merging
    merged_pairs: int = 0
    warnings: List[AbundanceWarning] = field(default_factory=list)

    @classmethod
    def from_write(cls, unitigs: int, arcs: int, write_stats: WriteStats) -> 'ConversionStats':
        return cls(
            unitigs=unitigs,
            nodes=write_stats.node_count,
            arcs=arcs,
            arc_lines=write_stats.arc_lines,
            merged_pairs=write_stats.merged_pairs,
            warnings=list(write_stats.warnings),
        )

    def summary(self) -> str:
        """Return human-readable summary."""
        return (
            f"Conversion Summary:\n"
            f"  Unitigs: {self.unitigs:,}\n"
            f"  Nodes: {self.nodes:,}\n"
            f"  Arcs: {self.arcs:,} built, {self.arc_lines:,} written "
            f"({self.merged_pairs:,} self-complemental pairs merged)\n"
            f"  Non-integer abundances: {len(self.warnings):,}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for serialization."""
        data = asdict(self)
        data['warnings'] = [
            {
                'arc_id': w.arc_id,
                'prefix': w.prefix,
                'total_abundance': w.total_abundance,
                'kmer_count': w.kmer_count,
            }
            for w in self.warnings
        ]
        return data


# ============================================================================
# Stream-Level Conversion
# ============================================================================

def node_to_arc_centric_dbg(k: int, input_handle: TextIO, output_handle: TextIO,
                            output_format: Union[str, OutputFormat] = OutputFormat.CANONICAL,
                            warning_logger: Optional[logging.Logger] = None,
                            prefix_padding: int = DEFAULT_PREFIX_PADDING) -> ConversionStats:
    """
    Convert a node-centric bcalm2 graph into an arc-centric graph.

    Args:
        k: k-mer size the bcalm2 graph was built with
        input_handle: bcalm2 text stream
        output_handle: Text stream receiving the arc-centric graph
        output_format: 'canonical' or 'legacy'
        warning_logger: Logger receiving abundance warnings
        prefix_padding: Bases beyond k shown in abundance warnings

    Returns:
        ConversionStats

    Raises:
        ValueError: If k < 2 or the output format is unknown
        FormatError: If the input is malformed
    """
    config = ConversionConfig(k, output_format, prefix_padding)
    sequence_store = SequenceStore()

    logger.info("Reading graph")
    records = read_bcalm2(input_handle)
    graph = BigraphBuilder(config.k, sequence_store).build(records)

    logger.info("Writing graph...")
    write_stats = write_arc_centric_dbg(graph, sequence_store, config.k, output_handle,
                                        config.output_format, warning_logger,
                                        config.warning_prefix_padding)
    return ConversionStats.from_write(len(records), graph.arc_count, write_stats)


# ============================================================================
# File-Level Pipeline
# ============================================================================

class ConversionPipeline:
    """
    Runs a conversion from an input file to an output file.

    Manages:
    - Typed conversion parameters from the configuration dictionary
    - Memory reports around loading and writing
    - Atomic output
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize pipeline.

        Args:
            config: Configuration dictionary (see arcweaver.config.schema)

        Raises:
            ValueError: If the conversion parameters are invalid
        """
        self.config = config
        self.conversion = ConversionConfig.from_dict(config)
        self.atomic_write = config.get('output', {}).get('atomic_write', True)
        self.memory = MemoryMeter(
            enabled=config.get('instrumentation', {}).get('memory_report', False)
        )
        self.logger = logging.getLogger(__name__)

    def run(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> ConversionStats:
        """
        Convert input_path into output_path.

        Returns:
            ConversionStats

        Raises:
            InputOutputError: If the input cannot be read or the output written
            FormatError: If the input is malformed
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        k = self.conversion.k

        self.logger.info(f"Converting {input_path} -> {output_path} (k={k})")
        self.memory.report("before loading")

        self.logger.info("Reading graph")
        records = read_bcalm2_file(input_path)
        sequence_store = SequenceStore()
        graph = BigraphBuilder(k, sequence_store).build(records)
        self.logger.debug(
            f"Stored {len(sequence_store)} distinct sequences "
            f"({sequence_store.total_bases():,} bases)"
        )

        self.memory.report("after loading")

        self.logger.info("Writing graph...")
        self.memory.report("before writing")
        write_stats = write_arc_centric_dbg_file(
            graph, sequence_store, k, output_path,
            output_format=self.conversion.output_format,
            atomic=self.atomic_write,
            prefix_padding=self.conversion.warning_prefix_padding,
        )
        self.memory.report("after writing")

        stats = ConversionStats.from_write(len(records), graph.arc_count, write_stats)
        self.logger.info("Success!")
        return stats


__all__ = [
    'ConversionConfig',
    'ConversionStats',
    'ConversionPipeline',
    'node_to_arc_centric_dbg',
    'setup_logging',
    'parse_log_level',
]
