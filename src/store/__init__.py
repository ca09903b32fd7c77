"""Report output layer.

This module persists analysis summary tables as JSON documents.
It is the boundary where lead-time figures are rounded for display.
"""
