"""
Shared utilities: error hierarchy and logging setup.
"""
