"""
Farm cost engine.

Temporal feed cost accounting and reporting: price tiers, cost annotation,
weighted averages, pivot tables and livestock interval calculations.
"""

__version__ = "0.1.0"
