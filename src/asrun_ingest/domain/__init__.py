"""
Domain layer - persisted entities and collaborator interfaces.

Programs are read-only catalog entries; Days, Broadcasts and LogFile
references are created by ingestion.
"""
