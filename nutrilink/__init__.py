"""
Nutrilink food data ingestion core.

Fuses nutrition-database search results, resolves products by barcode and
normalizes AI vision analysis output into consistent internal records.

Structure:
- domain/: Models, mappers, scoring and pure normalizers
- infrastructure/: Cache and upstream API clients
- application/: Search fusion and barcode resolution services
- api/: Thin FastAPI boundary
"""

__version__ = "1.0.0"
