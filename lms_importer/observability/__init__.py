"""
Logging and metrics for the importer.
"""
