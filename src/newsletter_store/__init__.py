"""
Newsletter Store - persistence layer for the monthly newsletter editor

Executes a small set of SQL statements against SQLite, or against an
in-process emulator backed by a JSON snapshot when SQLite is unavailable
or not wanted.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
