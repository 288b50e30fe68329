"""
Configuration loading for reports.
"""
