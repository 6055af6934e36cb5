"""
API layer
"""
