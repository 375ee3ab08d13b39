"""
Depth-bounded concurrent traversal of linked resource graphs.
"""

__version__ = "0.1.0"
