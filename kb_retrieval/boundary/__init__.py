"""
Boundary adapters: embedding providers, similarity indexes, relational storage.
"""
