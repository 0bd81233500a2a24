"""
querysim: Randomized property generation for deterministic database simulation.

Builds replayable interaction scripts that exercise a database engine and
check behavioral invariants against the results.
"""

__version__ = "0.1.0"
