"""
Use cases - ingestion orchestration and lookups over the broadcast store.
"""
