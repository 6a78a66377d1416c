"""
Core importer domain: models, validators, rules and entity schemas.
"""
