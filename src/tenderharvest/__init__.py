"""
TenderHarvest - Municipal tender harvester and normalizer.

Scrapes procurement listings from heterogeneous government sites, pulls
fields out of free text and linked documents, and emits one canonical
tabular record schema per source.
"""

__version__ = "0.1.0"
__app_name__ = "tenderharvest"
