"""reclaim - safe disk space cleanup.

Scans the filesystem, classifies files into cleanup candidates and
removes them through a validated, backup-aware cleanup engine.
"""

__version__ = "0.1.0"
