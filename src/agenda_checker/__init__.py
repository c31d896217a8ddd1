"""
agenda-checker - package root.

File: src/agenda_checker/__init__.py

Purpose
- Verify that the linked-list ordering of agenda items and their
  treatments in a local-decisions SPARQL store agrees with the explicit
  item positions, and derive a repair statement for gaps that can be
  filled mechanically.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
