"""Core infrastructure: logging, canonical JSON, corpus files."""
