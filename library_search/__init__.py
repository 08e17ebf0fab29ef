"""
School library book search.

Hybrid catalog search combining embedding similarity with weighted keyword
matching, served over HTTP with FastAPI and backed by a SQLite catalog.
"""

__version__ = "1.0.0"
