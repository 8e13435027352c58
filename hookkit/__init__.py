"""
hookkit - Building and testing agent lifecycle hooks.

This package provides the pieces a hook process and a hook test harness
both need: decoding hook input, encoding hook responses, classifying hook
output into a single decision, and parsing session transcripts.
"""

__version__ = "0.1.0"
