"""
grapplebuild: merges game script fragments and scene files into loadable assemblies.
"""

__version__ = "1.0.0"
