"""
Clarity Engine - signal classification and recommendation scoring.

Turns noisy business inputs (call transcripts, a business profile, stated
preferences) into a ranked, deduplicated, lifecycle-tracked set of
recommendations and revenue opportunities.
"""

__version__ = "0.1.0"
