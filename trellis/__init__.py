"""
Trellis - work-item hierarchy tracking for software releases.
"""

__version__ = "0.3.0"
