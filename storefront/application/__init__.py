"""
Application layer - repository contracts and entity services.
"""
