"""
Core package - Shared utilities.
"""
