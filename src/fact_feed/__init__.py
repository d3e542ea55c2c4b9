"""
Fact Feed - feed synchronization and mutation engine for crowd-sourced facts.

This package keeps a client-side feed of short "Today I Learned" facts in sync
with a remote table and blob store: filtered reads, fact submission with an
optional image, and confirmed-only voting.
"""

__version__ = "1.0.0"
