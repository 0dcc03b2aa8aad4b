"""
Lagerkontroll - Stock-Count Session Engine

Single-operator stock counting: pick a warehouse, register counted items by
hand or by barcode scan, and export the round as a semicolon-separated CSV.
"""

__version__ = "1.0.0"
__description__ = "Stock-count session engine with barcode scanning and CSV export"
