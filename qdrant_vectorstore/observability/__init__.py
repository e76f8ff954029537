"""
Observability package for vector store metrics.
"""
