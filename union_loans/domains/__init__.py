"""Domain layer: canonical entity shapes.

Domain modules should not depend on infrastructure; adapters translate backend
records into these types.
"""
