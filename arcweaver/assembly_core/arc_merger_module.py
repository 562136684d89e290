#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ArcWeaver v0.1.0

Self-complemental arc merging and abundance weights.

Some unitigs are adjacent to their own reverse complement at the same
junction pair. Building one arc per orientation then yields two mirrored
arcs spelling the same sequence between the same nodes, which would count
that sequence twice. EdgeMerger collapses such pairs into one arc with a
doubled weight; AbundanceCalculator turns total abundances into integer
per-arc weights.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional
import logging

from arcweaver.assembly_core.bigraph_module import Bigraph, BigraphArc, Neighbor
from arcweaver.assembly_core.sequence_store import SequenceHandle, SequenceStore
from arcweaver.errors import AbundanceWarning

DEFAULT_PREFIX_PADDING = 10


# ============================================================================
# Abundance
# ============================================================================

class AbundanceCalculator:
    """
    Integer arc weights from total abundance and k-mer count.

    weight = floor(total_abundance / kmer_count) * multiplier. When the
    division is inexact a warning naming the arc by a sequence prefix of
    k + prefix_padding bases is logged and recorded, and the truncated
    value is used.
    """

    def __init__(self, k: int, sequence_store: SequenceStore,
                 logger: Optional[logging.Logger] = None,
                 prefix_padding: int = DEFAULT_PREFIX_PADDING):
        if k < 2:
            raise ValueError(f"k must be >= 2, got {k}")
        self.k = k
        self.sequence_store = sequence_store
        self.logger = logger or logging.getLogger(__name__)
        self.prefix_padding = prefix_padding
        self.warnings: List[AbundanceWarning] = []

    def kmer_count(self, arc: BigraphArc) -> int:
        return arc.length - (self.k - 1)

    def weight(self, arc: BigraphArc, multiplier: int = 1) -> int:
        """
        Weight of an arc.

        Args:
            arc: Arc to weigh
            multiplier: 2 for merged self-complemental pairs, 1 otherwise

        Returns:
            Integer weight
        """
        kmer_count = self.kmer_count(arc)
        if kmer_count <= 0:
            raise ValueError(f"Arc {arc.id} of length {arc.length} has no {self.k}-mers")

        if arc.total_abundance % kmer_count != 0:
            prefix_length = min(self.k + self.prefix_padding, arc.length)
            prefix = self.sequence_store.render(arc.sequence_handle, arc.forwards)[:prefix_length]
            warning = AbundanceWarning(arc.id, prefix, arc.total_abundance, kmer_count)
            self.warnings.append(warning)
            self.logger.warning(str(warning))

        return (arc.total_abundance // kmer_count) * multiplier


# ============================================================================
# Merging
# ============================================================================

@dataclass(frozen=True)
class MergedArc:
    """An arc that survives merging, with its weight multiplier."""
    arc_id: int
    multiplier: int


@dataclass
class MergeStats:
    merged_pairs: int = 0
    emitted_arcs: int = 0
    merged_unitigs: List[int] = field(default_factory=list)


class EdgeMerger:
    """
    Scans each node's outgoing arcs in target order and collapses mirrored
    duplicate pairs.

    Two consecutive arcs in the sorted list are merged when they share the
    target, are mirrors of each other, and spell the same sequence: either
    both read the same stored sequence in the same orientation, or one is
    forwards, the other backwards, and the forwards sequence equals the
    reverse complement of the other over the length of the shorter one.
    """

    def __init__(self, graph: Bigraph, sequence_store: SequenceStore,
                 logger: Optional[logging.Logger] = None):
        self.graph = graph
        self.sequence_store = sequence_store
        self.logger = logger or logging.getLogger(__name__)
        self.stats = MergeStats()

    def sorted_neighbors(self, node_id: int) -> List[Neighbor]:
        """Outgoing arcs of a node, stable-sorted by target node id."""
        return sorted(self.graph.out_neighbors(node_id), key=lambda neighbor: neighbor.node_id)

    def is_mergeable(self, current: Neighbor, successor: Neighbor) -> bool:
        if successor.node_id != current.node_id:
            return False
        if self.graph.mirror_arc(current.arc_id) != successor.arc_id:
            return False

        arc = self.graph.arc(current.arc_id)
        other = self.graph.arc(successor.arc_id)
        if arc.forwards == other.forwards:
            return arc.sequence_handle == other.sequence_handle

        forward_arc, backward_arc = (arc, other) if arc.forwards else (other, arc)
        return self._matches_reverse_complement(
            forward_arc.sequence_handle, backward_arc.sequence_handle
        )

    def _matches_reverse_complement(self, forward: SequenceHandle, backward: SequenceHandle) -> bool:
        # zip stops at the shorter sequence, trailing bases of the longer one are not compared
        forward_codes = map(int, self.sequence_store.get(forward))
        reverse_codes = self.sequence_store.reverse_complement_view(backward)
        return all(a == b for a, b in zip(forward_codes, reverse_codes))

    def merge_node(self, node_id: int) -> Iterator[MergedArc]:
        """
        Surviving arcs of one node, in target order.

        Yields:
            MergedArc with multiplier 2 for merged pairs, 1 otherwise
        """
        neighbors = self.sorted_neighbors(node_id)
        index = 0
        while index < len(neighbors):
            current = neighbors[index]
            successor = neighbors[index + 1] if index + 1 < len(neighbors) else None

            if successor is not None and self.is_mergeable(current, successor):
                arc = self.graph.arc(current.arc_id)
                self.logger.debug(
                    f"Merging self-complemental arcs {current.arc_id} and {successor.arc_id} "
                    f"of unitig {arc.unitig_id} between nodes {node_id} and {current.node_id}"
                )
                self.stats.merged_pairs += 1
                self.stats.merged_unitigs.append(arc.unitig_id)
                self.stats.emitted_arcs += 1
                yield MergedArc(current.arc_id, 2)
                index += 2
            else:
                self.stats.emitted_arcs += 1
                yield MergedArc(current.arc_id, 1)
                index += 1

    def __iter__(self) -> Iterator[MergedArc]:
        for node_id in self.graph.node_indices():
            yield from self.merge_node(node_id)


# ============================================================================
# Weighted Arc Stream
# ============================================================================

@dataclass(frozen=True)
class WeightedArc:
    """A surviving arc with everything the writer needs."""
    arc_id: int
    source: int
    target: int
    weight: int
    mirror_source: int
    mirror_target: int
    sequence_handle: SequenceHandle
    forwards: bool


def iter_weighted_arcs(graph: Bigraph, merger: EdgeMerger,
                       calculator: AbundanceCalculator) -> Iterator[WeightedArc]:
    """
    Merge and weigh arcs node by node, in (source, target) order.

    Args:
        graph: Arc-centric graph
        merger: EdgeMerger over the graph
        calculator: AbundanceCalculator for the same k

    Yields:
        WeightedArc objects
    """
    for merged in merger:
        arc = graph.arc(merged.arc_id)
        mirror_source, mirror_target = graph.arc_endpoints(graph.mirror_arc(merged.arc_id))
        yield WeightedArc(
            arc_id=arc.id,
            source=arc.source,
            target=arc.target,
            weight=calculator.weight(arc, merged.multiplier),
            mirror_source=mirror_source,
            mirror_target=mirror_target,
            sequence_handle=arc.sequence_handle,
            forwards=arc.forwards,
        )


__all__ = [
    'AbundanceCalculator',
    'EdgeMerger',
    'MergedArc',
    'MergeStats',
    'WeightedArc',
    'iter_weighted_arcs',
    'DEFAULT_PREFIX_PADDING',
]
