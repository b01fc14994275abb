#!/usr/bin/env python3

"""
wobblesync: mirror RSS/Atom feeds into Wobble topics.
"""

__version__ = "1.0.0"
