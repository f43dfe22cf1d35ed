"""
Domain layer - entities, specifications and exceptions.
"""
