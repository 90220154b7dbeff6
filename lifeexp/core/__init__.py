"""
Core models, schema, validation rules and configuration.
"""
