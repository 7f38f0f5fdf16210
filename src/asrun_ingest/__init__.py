"""
asrun-ingest: AS-RUN log ingestion and broadcast reconciliation.

Decodes fixed-width transmission AS-RUN logs, matches entries against the
program catalog, records time-bounded broadcasts and associates billboards
with program airings.
"""

__version__ = "0.1.0"
