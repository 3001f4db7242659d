"""Interactive view layer: viewport, rendering, pointer interaction.

May import from domain, config, and infrastructure.  Backends that need a
display (pygame) are imported lazily so the rest stays headless.
"""
