#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArcWeaver v0.1.0

Package initialization and version metadata.

Converts node-centric compacted de Bruijn graphs (bcalm2 unitigs) into
arc-centric bidirected graphs.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .version import __version__

__all__ = ["__version__"]

# ArcWeaver v0.1.0
# Any usage is subject to this software's license.
