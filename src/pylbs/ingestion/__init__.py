"""Ingestion layer.

This package reads cell tower datasets (local or downloaded CSV exports),
filters and decodes their rows and upserts them into a tower store.
"""

from pylbs.ingestion.importer import ImportPhase, ImportProgress, Importer, is_incremental_source

__all__ = ["ImportPhase", "ImportProgress", "Importer", "is_incremental_source"]
