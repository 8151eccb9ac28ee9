"""
Knowledge retrieval subsystem.

Embeds knowledge base chunks, stores them in namespace-scoped similarity
indexes, retrieves the most relevant chunks for a query and migrates
vectors between namespaces or backends.
"""

__version__ = "0.1.0"
