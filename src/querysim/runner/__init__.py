"""Execution side: simulator environment, reference driver and session runner.

Import submodules directly; this package does not re-export them so that
generation can depend on runner.env without an import cycle.
"""
