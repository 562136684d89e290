#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ArcWeaver v0.1.0

Arc-centric bidirected de Bruijn graph.
- Every unitig becomes a pair of mirrored arcs: one reading the unitig as
  stored, one reading its reverse complement
- Nodes are junctions, i.e. the (k-1)-mers at unitig ends
- Junctions are resolved with a union-find over oriented unitig ends,
  joining ends named by link tags and ends sharing the same (k-1)-mer
- Node ids and arc ids are dense integers assigned once, in input order
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import logging

from arcweaver.assembly_core.sequence_store import SequenceHandle, SequenceStore
from arcweaver.errors import FormatError
from arcweaver.io.bcalm2_module import UnitigRecord
from arcweaver.utils.sequence_utils import end_kmers, reverse_complement

logger = logging.getLogger(__name__)


# ============================================================================
# Core Data Structures
# ============================================================================

@dataclass
class BigraphArc:
    """
    Directed arc of the bidirected graph.

    Attributes:
        id: Arc index
        source: Source node id
        target: Target node id
        length: Length in bases (unitig length)
        total_abundance: Sum of k-mer counts of the unitig
        sequence_handle: Handle of the unitig sequence in the SequenceStore
        forwards: True if the arc reads the unitig as stored, False if it
            reads its reverse complement
        unitig_id: Written id of the originating unitig
    """
    id: int
    source: int
    target: int
    length: int
    total_abundance: int
    sequence_handle: SequenceHandle
    forwards: bool
    unitig_id: int = -1


@dataclass(frozen=True)
class Neighbor:
    """An outgoing arc seen from its source node."""
    node_id: int
    arc_id: int


@dataclass
class Bigraph:
    """
    Directed multigraph with a mirror relation on arcs.

    Uses adjacency lists addressed by dense integer ids. The graph is built
    once by BigraphBuilder and only read afterwards.
    """
    node_count: int = 0
    arcs: List[BigraphArc] = field(default_factory=list)
    out_arcs: List[List[int]] = field(default_factory=list)
    mirrors: List[int] = field(default_factory=list)

    def add_node(self) -> int:
        """Add a node and return its id."""
        node_id = self.node_count
        self.node_count += 1
        self.out_arcs.append([])
        return node_id

    def add_arc(self, source: int, target: int, length: int, total_abundance: int,
                sequence_handle: SequenceHandle, forwards: bool,
                unitig_id: int = -1) -> int:
        """Add an arc and return its id. Its mirror must be set with set_mirrors()."""
        arc_id = len(self.arcs)
        self.arcs.append(BigraphArc(
            id=arc_id,
            source=source,
            target=target,
            length=length,
            total_abundance=total_abundance,
            sequence_handle=sequence_handle,
            forwards=forwards,
            unitig_id=unitig_id,
        ))
        self.out_arcs[source].append(arc_id)
        self.mirrors.append(-1)
        return arc_id

    def set_mirrors(self, arc_a: int, arc_b: int):
        """Record two distinct arcs as mirrors of each other."""
        if arc_a == arc_b:
            raise ValueError(f"Arc {arc_a} cannot be its own mirror")
        self.mirrors[arc_a] = arc_b
        self.mirrors[arc_b] = arc_a

    @property
    def arc_count(self) -> int:
        return len(self.arcs)

    def node_indices(self) -> range:
        return range(self.node_count)

    def arc(self, arc_id: int) -> BigraphArc:
        return self.arcs[arc_id]

    def arc_endpoints(self, arc_id: int) -> Tuple[int, int]:
        arc = self.arcs[arc_id]
        return arc.source, arc.target

    def mirror_arc(self, arc_id: int) -> int:
        """Mirror of an arc, in O(1)."""
        return self.mirrors[arc_id]

    def out_neighbors(self, node_id: int) -> Iterator[Neighbor]:
        """Outgoing arcs of a node in insertion order."""
        for arc_id in self.out_arcs[node_id]:
            yield Neighbor(self.arcs[arc_id].target, arc_id)

    def out_degree(self, node_id: int) -> int:
        return len(self.out_arcs[node_id])


# ============================================================================
# Junction Resolution
# ============================================================================

# Oriented ends of unitig i live at 4 * i + slot. An IN end is where an
# orientation of the unitig is entered, an OUT end where it is left.
IN_FORWARD = 0
OUT_FORWARD = 1
IN_REVERSE = 2
OUT_REVERSE = 3


def mirror_end(end: int) -> int:
    """Same unitig end seen from the other strand (IN_FORWARD <-> OUT_REVERSE)."""
    return end ^ 3


def out_end(unitig_index: int, forwards: bool) -> int:
    return 4 * unitig_index + (OUT_FORWARD if forwards else OUT_REVERSE)


def in_end(unitig_index: int, forwards: bool) -> int:
    return 4 * unitig_index + (IN_FORWARD if forwards else IN_REVERSE)


class EndUnionFind:
    """Union-find over oriented unitig ends, with path halving and union by size."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.size = [1] * size

    def find(self, item: int) -> int:
        parent = self.parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: int, b: int) -> bool:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return False
        if self.size[root_a] < self.size[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        self.size[root_a] += self.size[root_b]
        return True


# ============================================================================
# Bigraph Builder
# ============================================================================

class BigraphBuilder:
    """
    Builds the arc-centric bidirected graph from bcalm2 unitigs.

    Node numbering is a pure function of the input: records are visited in
    input order, and the first time a junction is met at the head or the
    tail of a unitig it gets the next free id, immediately followed by its
    reverse-complement junction (unless the junction is its own reverse
    complement). Arcs are added per record, forward arc first.
    """

    def __init__(self, k: int, sequence_store: SequenceStore):
        """
        Initialize builder.

        Args:
            k: k-mer size of the de Bruijn graph (>= 2)
            sequence_store: Store receiving the unitig sequences
        """
        if k < 2:
            raise ValueError(f"k must be >= 2, got {k}")
        self.k = k
        self.sequence_store = sequence_store

    def build(self, records: Sequence[UnitigRecord]) -> Bigraph:
        """
        Build the graph.

        Args:
            records: Parsed unitigs in input order

        Returns:
            Bigraph with mirror pairing

        Raises:
            FormatError: On unitigs shorter than k, invalid sequences, links
                to unknown ids or links whose ends do not overlap
        """
        index_of_id = {record.id: index for index, record in enumerate(records)}
        end_kmer_table = self._end_kmer_table(records)

        junctions = EndUnionFind(4 * len(records))
        self._join_linked_ends(records, index_of_id, end_kmer_table, junctions)
        self._join_identical_ends(records, end_kmer_table, junctions)

        graph = Bigraph()
        node_of_root = self._number_junctions(records, junctions, graph)

        def node(end: int) -> int:
            return node_of_root[junctions.find(end)]

        for index, record in enumerate(records):
            try:
                handle = self.sequence_store.store(record.sequence)
            except ValueError as e:
                raise FormatError(str(e), record_id=record.id,
                                  record_number=record.record_number) from e

            forward_arc = graph.add_arc(
                node(4 * index + IN_FORWARD), node(4 * index + OUT_FORWARD),
                record.length, record.total_abundance, handle, True, record.id,
            )
            backward_arc = graph.add_arc(
                node(4 * index + IN_REVERSE), node(4 * index + OUT_REVERSE),
                record.length, record.total_abundance, handle, False, record.id,
            )
            graph.set_mirrors(forward_arc, backward_arc)

        logger.info(f"Built bigraph with {graph.node_count} nodes and {graph.arc_count} arcs")
        return graph

    def _end_kmer_table(self, records: Sequence[UnitigRecord]) -> List[str]:
        """(k-1)-mer of every oriented end, indexed like the union-find."""
        table = []
        for record in records:
            if record.length < self.k:
                raise FormatError(
                    f"Unitig of length {record.length} is shorter than k = {self.k}",
                    record_id=record.id, record_number=record.record_number
                )
            head, tail = end_kmers(record.sequence, self.k)
            try:
                table.extend((head, tail, reverse_complement(tail), reverse_complement(head)))
            except KeyError as e:
                raise FormatError(f"Invalid DNA symbol {e.args[0]!r}",
                                  record_id=record.id,
                                  record_number=record.record_number) from e
        return table

    def _join_linked_ends(self, records: Sequence[UnitigRecord], index_of_id: Dict[int, int],
                          end_kmer_table: List[str], junctions: EndUnionFind):
        for index, record in enumerate(records):
            for link in record.links:
                target_index = index_of_id.get(link.target_id)
                if target_index is None:
                    raise FormatError(f"Link {link} refers to unknown unitig {link.target_id}",
                                      record_id=record.id, record_number=record.record_number)

                leaving = out_end(index, link.forwards)
                entering = in_end(target_index, link.target_forwards)
                if end_kmer_table[leaving] != end_kmer_table[entering]:
                    raise FormatError(
                        f"Link {link} joins ends that do not overlap by k - 1 = {self.k - 1} bases",
                        record_id=record.id, record_number=record.record_number
                    )

                junctions.union(leaving, entering)
                junctions.union(mirror_end(leaving), mirror_end(entering))

    @staticmethod
    def _join_identical_ends(records: Sequence[UnitigRecord], end_kmer_table: List[str],
                             junctions: EndUnionFind):
        first_end_of_kmer: Dict[str, int] = {}
        for end, kmer in enumerate(end_kmer_table):
            first = first_end_of_kmer.setdefault(kmer, end)
            if first != end:
                if junctions.union(first, end):
                    logger.debug(
                        f"Joining unlinked ends of unitigs {records[first // 4].id} and "
                        f"{records[end // 4].id} sharing (k-1)-mer {kmer}"
                    )

    @staticmethod
    def _number_junctions(records: Sequence[UnitigRecord], junctions: EndUnionFind,
                          graph: Bigraph) -> Dict[int, int]:
        node_of_root: Dict[int, int] = {}
        for index in range(len(records)):
            for slot in (IN_FORWARD, OUT_FORWARD):
                end = 4 * index + slot
                root = junctions.find(end)
                if root in node_of_root:
                    continue
                node_of_root[root] = graph.add_node()
                mirror_root = junctions.find(mirror_end(end))
                if mirror_root != root:
                    node_of_root[mirror_root] = graph.add_node()
        return node_of_root


def build_bigraph(records: Sequence[UnitigRecord], k: int,
                  sequence_store: Optional[SequenceStore] = None) -> Tuple[Bigraph, SequenceStore]:
    """
    Convenience wrapper around BigraphBuilder.

    Returns:
        Tuple of (graph, sequence_store)
    """
    sequence_store = sequence_store if sequence_store is not None else SequenceStore()
    graph = BigraphBuilder(k, sequence_store).build(records)
    return graph, sequence_store


__all__ = [
    'BigraphArc',
    'Neighbor',
    'Bigraph',
    'EndUnionFind',
    'BigraphBuilder',
    'build_bigraph',
    'mirror_end',
]
