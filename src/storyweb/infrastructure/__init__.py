"""Infrastructure layer: input loading, frame scheduling, and the layout engine.

May import from domain and config. Must never import from services, view,
commands, or output.
"""
