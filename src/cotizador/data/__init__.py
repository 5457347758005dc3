"""Data subpackage - loads the sheet tables the engine prices against."""
from .catalog_loader import TableSnapshot, load_tables

__all__ = ['TableSnapshot', 'load_tables']
