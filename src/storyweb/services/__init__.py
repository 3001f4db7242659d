"""Service layer: operations over graph inputs returning ServiceResult.

Services may import from domain, infrastructure, and view layers.
They must never import from commands or output.
"""
