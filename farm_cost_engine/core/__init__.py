"""
Core modules for the farm cost engine.

This package contains the pure computation layer: price tier resolution,
cost annotation, weighted averages, dimension bucketing, pivot tables and
livestock interval calculations.
"""
