"""
Output module for writing extracted metadata.

Supports:
- Catalog importer CSV records (20 table / 30 column)
"""

from db2meta.output.csv_writer import CsvSink

__all__ = [
    "CsvSink",
]
