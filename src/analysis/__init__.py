"""Lead-time aggregation engine.

This module summarizes expanded observations by category, manufacturer,
month, and category hierarchy, and ranks keys by data sufficiency.
"""
