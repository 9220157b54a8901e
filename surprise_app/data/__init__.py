"""
Dataset models and payload parsers.

Converts the statistics service JSON into immutable dataset records.
"""
