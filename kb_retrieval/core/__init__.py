"""
Core use cases: knowledge linkage, knowledge search and vector migration.
"""
