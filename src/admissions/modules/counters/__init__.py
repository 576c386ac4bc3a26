"""
Counters module - Atomic named sequences.
"""

from admissions.modules.counters.repository import next_sequence

__all__ = ["next_sequence"]
