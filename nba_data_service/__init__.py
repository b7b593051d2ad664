"""
nba_data_service — balldontlie NBA game ingestion and day-keyed snapshot storage.
"""

__version__ = "0.1.0"
