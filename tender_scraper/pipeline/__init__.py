"""
Import pipeline - classify scraped tenders and persist them.
"""

from .importer import TenderImporter, infer_location

__all__ = ["TenderImporter", "infer_location"]
