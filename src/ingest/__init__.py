"""Quote ingestion pipeline.

This module reads quote and category sources and normalizes manufacturer
names. It prepares raw records for the expansion and analysis layers.
"""
