"""Domain layer: input records, graph model, and the filter cascade.

This layer depends only on stdlib, pydantic, and networkx.
It must never import from services, infrastructure, view, commands, or config.
"""
