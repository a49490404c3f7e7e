"""Requirements injection for serverless Python deployment archives.

Merges externally staged dependency files into already-built function
archives, honouring exclusion rules and Unix permission bits.
"""

__version__ = "0.1.0"
