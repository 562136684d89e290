#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArcWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
from pathlib import Path
import tempfile
import shutil


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="arcweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def four_unitig_graph():
    """Four unitigs around a repeated CGAT motif with one branching exit (k=14)."""
    return """>0 LN:i:14 KC:i:21 km:f:21.0   L:-:2:+  L:+:2:+
ATCGATCGATCGAT
>1 LN:i:14 KC:i:20 km:f:20.0   L:-:2:-  L:+:2:-
CGATCGATCGATCG
>2 LN:i:14 KC:i:43 km:f:43.0   L:+:1:+ L:+:1:- L:+:3:+  L:-:0:+ L:-:0:-
TCGATCGATCGATC
>3 LN:i:16 KC:i:3 km:f:1.0   L:-:2:-
CGATCGATCGATCAGT
"""


@pytest.fixture
def four_unitig_expected():
    """Canonical output for four_unitig_graph."""
    return """6
0 1 42 0 1 ATCGATCGATCGAT
1 2 43 3 0 TCGATCGATCGATC
2 3 40 2 3 CGATCGATCGATCG
2 4 1 5 3 CGATCGATCGATCAGT
3 0 43 1 2 GATCGATCGATCGA
5 3 1 2 4 ACTGATCGATCGATCG
"""


@pytest.fixture
def circularised_graph():
    """Six unitigs where the branching exit loops back into the motif (k=14)."""
    return """>0 LN:i:14 KC:i:20 km:f:20.0   L:-:1:-  L:+:1:-
CGATCGATCGATCG
>1 LN:i:14 KC:i:43 km:f:43.0   L:+:0:+ L:+:0:- L:+:4:+ L:+:5:+  L:-:2:+ L:-:2:- L:-:5:-
TCGATCGATCGATC
>2 LN:i:14 KC:i:21 km:f:21.0   L:-:1:+  L:+:1:+
ATCGATCGATCGAT
>3 LN:i:27 KC:i:14 km:f:1.0   L:-:4:-  L:+:4:-
GATCGATCGATCAGTGATCGATCGATC
>4 LN:i:14 KC:i:2 km:f:2.0   L:-:1:-  L:+:3:+ L:+:3:-
CGATCGATCGATCA
>5 LN:i:26 KC:i:13 km:f:1.0   L:-:1:-  L:+:1:+
CGATCGATCGATCTCGATCGATCGAT
"""


@pytest.fixture
def circularised_expected():
    """Canonical output for circularised_graph."""
    return """6
0 1 40 0 1 CGATCGATCGATCG
0 2 1 3 1 CGATCGATCGATCTCGATCGATCGAT
0 4 2 5 1 CGATCGATCGATCA
1 3 43 2 0 GATCGATCGATCGA
2 0 43 1 3 TCGATCGATCGATC
3 1 1 0 2 ATCGATCGATCGAGATCGATCGATCG
3 2 42 3 2 ATCGATCGATCGAT
4 5 1 4 5 GATCGATCGATCAGTGATCGATCGATC
4 5 1 4 5 GATCGATCGATCACTGATCGATCGATC
5 1 2 0 4 TGATCGATCGATCG
"""


@pytest.fixture
def self_complemental_graph():
    """
    Unitigs with reverse-complemental ends (k=15).

    Unitig 0 is its own reverse complement and unitig 3 enters it. Unitig 1
    starts with the reverse complement of its last 14 bases, but its middle
    base breaks the symmetry. Unitig 2 stands alone.
    """
    return """>0 LN:i:16 KC:i:12 km:f:6.0   L:+:3:- L:-:3:-
ACGGTCAATTGACCGT
>1 LN:i:29 KC:i:30 km:f:2.0
CATTAGGCAGTCCAATGGACTGCCTAATG
>2 LN:i:16 KC:i:10 km:f:5.0
TTGCAGCATGCGAATC
>3 LN:i:15 KC:i:7 km:f:7.0   L:+:0:+ L:+:0:-
GACGGTCAATTGACC
"""


@pytest.fixture
def self_complemental_expected():
    """Canonical output for self_complemental_graph."""
    return """10
0 1 12 0 1 ACGGTCAATTGACCGT
1 9 7 8 0 GGTCAATTGACCGTC
2 3 2 2 3 CATTAGGCAGTCCAATGGACTGCCTAATG
2 3 2 2 3 CATTAGGCAGTCCATTGGACTGCCTAATG
4 6 5 7 5 TTGCAGCATGCGAATC
7 5 5 4 6 GATTCGCATGCTGCAA
8 0 7 1 9 GACGGTCAATTGACC
"""


@pytest.fixture
def bcalm2_file(temp_output_dir, four_unitig_graph):
    """four_unitig_graph written to disk."""
    path = temp_output_dir / "unitigs.fa"
    path.write_text(four_unitig_graph)
    return path

# ArcWeaver v0.1.0
# Any usage is subject to this software's license.
