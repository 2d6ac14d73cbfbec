"""
Infrastructure Module

Concrete cache stores and the leveled cascade that composes them.
"""
