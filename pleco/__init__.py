"""
Pleco: crawl hyperdrives reachable from a set of seeds.
"""

__version__ = "0.1.0"
