#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArcWeaver v0.1.0

Tests for self-complemental arc merging and abundance weights.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import io
import logging

import pytest
from arcweaver.assembly_core.arc_merger_module import (
    AbundanceCalculator,
    EdgeMerger,
    MergedArc,
    iter_weighted_arcs,
)
from arcweaver.assembly_core.bigraph_module import Bigraph, build_bigraph
from arcweaver.assembly_core.sequence_store import SequenceStore
from arcweaver.io.bcalm2_module import read_bcalm2


def mirrored_pair(forward_sequence, backward_sequence, forwards=(True, False),
                  total_abundance=6):
    """Two mirrored arcs 0 -> 1 with the given sequences and orientations."""
    store = SequenceStore()
    graph = Bigraph()
    graph.add_node()
    graph.add_node()
    first = graph.add_arc(0, 1, len(forward_sequence), total_abundance,
                          store.store(forward_sequence), forwards[0])
    second = graph.add_arc(0, 1, len(backward_sequence), total_abundance,
                           store.store(backward_sequence), forwards[1])
    graph.set_mirrors(first, second)
    return graph, store


class TestEdgeMerger:
    """Test detection of mirrored duplicate arcs."""

    def test_same_orientation_same_sequence_merges(self):
        graph, store = mirrored_pair("ACGTT", "ACGTT", forwards=(True, True))
        merged = list(EdgeMerger(graph, store))
        assert merged == [MergedArc(0, 2)]

    def test_same_orientation_different_sequence_kept(self):
        graph, store = mirrored_pair("ACGTT", "ACGTA", forwards=(True, True))
        merged = list(EdgeMerger(graph, store))
        assert merged == [MergedArc(0, 1), MergedArc(1, 1)]

    def test_reverse_complemental_pair_merges(self):
        """A forward arc equal to the reverse complement of its backward mirror."""
        graph, store = mirrored_pair("AACG", "CGTT")
        assert list(EdgeMerger(graph, store)) == [MergedArc(0, 2)]

    def test_backward_arc_first_merges(self):
        graph, store = mirrored_pair("CGTT", "AACG", forwards=(False, True))
        assert list(EdgeMerger(graph, store)) == [MergedArc(0, 2)]

    def test_non_complemental_pair_kept(self):
        graph, store = mirrored_pair("ACGTT", "ACGTT")
        merged = list(EdgeMerger(graph, store))
        assert [m.multiplier for m in merged] == [1, 1]

    def test_comparison_stops_at_shorter_sequence(self):
        """Only the overlap of both lengths is compared; the excess tail is not."""
        graph, store = mirrored_pair("ACGTAAA", "ACGT")
        assert list(EdgeMerger(graph, store)) == [MergedArc(0, 2)]

    def test_non_mirrors_never_merge(self):
        store = SequenceStore()
        graph = Bigraph()
        for _ in range(4):
            graph.add_node()
        handle = store.store("ACGT")
        a = graph.add_arc(0, 1, 4, 2, handle, True)
        b = graph.add_arc(0, 1, 4, 2, handle, True)
        c = graph.add_arc(2, 3, 4, 2, handle, False)
        d = graph.add_arc(2, 3, 4, 2, handle, False)
        graph.set_mirrors(a, c)
        graph.set_mirrors(b, d)

        merger = EdgeMerger(graph, store)
        assert [m.multiplier for m in merger] == [1, 1, 1, 1]
        assert merger.stats.merged_pairs == 0

    def test_neighbors_sorted_by_target(self):
        store = SequenceStore()
        graph = Bigraph()
        for _ in range(3):
            graph.add_node()
        handle = store.store("ACGTT")
        graph.add_arc(0, 2, 5, 3, handle, True)
        graph.add_arc(0, 1, 5, 3, handle, True)
        graph.add_arc(0, 2, 5, 3, handle, False)

        merger = EdgeMerger(graph, store)
        assert [n.arc_id for n in merger.sorted_neighbors(0)] == [1, 0, 2]

    def test_stats(self, four_unitig_graph):
        graph, store = build_bigraph(read_bcalm2(io.StringIO(four_unitig_graph)), 14)
        merger = EdgeMerger(graph, store)
        list(merger)

        assert merger.stats.merged_pairs == 2
        assert merger.stats.emitted_arcs == 6
        assert merger.stats.merged_unitigs == [0, 1]


class TestAbundanceCalculator:
    """Test integer arc weights."""

    def test_exact_weight(self):
        graph, store = mirrored_pair("ACGTT", "ACGTT", total_abundance=6)
        calculator = AbundanceCalculator(3, store)
        assert calculator.kmer_count(graph.arc(0)) == 3
        assert calculator.weight(graph.arc(0)) == 2
        assert calculator.weight(graph.arc(0), multiplier=2) == 4
        assert calculator.warnings == []

    def test_inexact_weight_truncates_and_warns(self, caplog):
        graph, store = mirrored_pair("ACGTT", "ACGTT", total_abundance=7)
        calculator = AbundanceCalculator(3, store)

        with caplog.at_level(logging.WARNING):
            weight = calculator.weight(graph.arc(0), multiplier=2)

        assert weight == 4
        assert "Found edge with non-integer average abundance: ACGTT" in caplog.text
        assert len(calculator.warnings) == 1
        warning = calculator.warnings[0]
        assert warning.kmer_count == 3
        assert warning.remainder == 1

    def test_warning_prefix_is_k_plus_ten_bases(self):
        sequence = "ACGT" * 10
        graph, store = mirrored_pair(sequence, sequence, total_abundance=39)
        calculator = AbundanceCalculator(5, store)
        calculator.weight(graph.arc(0))
        assert calculator.warnings[0].prefix == sequence[:15]

    def test_warning_prefix_uses_arc_orientation(self):
        graph, store = mirrored_pair("AACGT", "AACGT", total_abundance=4)
        calculator = AbundanceCalculator(3, store)
        calculator.weight(graph.arc(1))
        assert calculator.warnings[0].prefix == "ACGTT"

    def test_injected_logger(self, caplog):
        graph, store = mirrored_pair("ACGTT", "ACGTT", total_abundance=7)
        calculator = AbundanceCalculator(3, store, logger=logging.getLogger("conversion.warnings"))

        with caplog.at_level(logging.WARNING):
            calculator.weight(graph.arc(0))

        assert [record.name for record in caplog.records] == ["conversion.warnings"]

    def test_arc_without_kmers(self):
        graph, store = mirrored_pair("ACG", "ACG")
        calculator = AbundanceCalculator(5, store)
        with pytest.raises(ValueError):
            calculator.weight(graph.arc(0))

    def test_k_too_small(self):
        with pytest.raises(ValueError):
            AbundanceCalculator(1, SequenceStore())


class TestWeightedArcs:
    """Test the merged, weighted arc stream."""

    def test_four_unitig_weights(self, four_unitig_graph):
        graph, store = build_bigraph(read_bcalm2(io.StringIO(four_unitig_graph)), 14)
        arcs = list(iter_weighted_arcs(graph, EdgeMerger(graph, store),
                                       AbundanceCalculator(14, store)))

        assert [(a.source, a.target, a.weight) for a in arcs] == [
            (0, 1, 42), (1, 2, 43), (2, 3, 40), (2, 4, 1), (3, 0, 43), (5, 3, 1),
        ]
        assert [(a.mirror_source, a.mirror_target) for a in arcs] == [
            (0, 1), (3, 0), (2, 3), (5, 3), (1, 2), (2, 4),
        ]

    def test_weight_matches_formula(self, circularised_graph):
        k = 14
        graph, store = build_bigraph(read_bcalm2(io.StringIO(circularised_graph)), k)
        merger = EdgeMerger(graph, store)
        merged = {m.arc_id: m.multiplier for m in merger}
        arcs = list(iter_weighted_arcs(graph, EdgeMerger(graph, store),
                                       AbundanceCalculator(k, store)))

        for weighted in arcs:
            arc = graph.arc(weighted.arc_id)
            expected = arc.total_abundance // (arc.length - (k - 1)) * merged[arc.id]
            assert weighted.weight == expected
