"""
Assembly Core module for ArcWeaver.

This module provides the arc-centric graph construction:
- Sequence interning with lazy reverse-complement views
- Bidirected bigraph construction with mirror pairing
- Self-complemental arc merging and abundance weights
"""

from .sequence_store import (
    SequenceHandle,
    SequenceStore,
    ReverseComplementView,
)

from .bigraph_module import (
    Bigraph,
    BigraphArc,
    BigraphBuilder,
    EndUnionFind,
    Neighbor,
    build_bigraph,
)

from .arc_merger_module import (
    AbundanceCalculator,
    EdgeMerger,
    MergedArc,
    MergeStats,
    WeightedArc,
    iter_weighted_arcs,
)

__all__ = [
    'SequenceHandle',
    'SequenceStore',
    'ReverseComplementView',
    'Bigraph',
    'BigraphArc',
    'BigraphBuilder',
    'EndUnionFind',
    'Neighbor',
    'build_bigraph',
    'AbundanceCalculator',
    'EdgeMerger',
    'MergedArc',
    'MergeStats',
    'WeightedArc',
    'iter_weighted_arcs',
]
