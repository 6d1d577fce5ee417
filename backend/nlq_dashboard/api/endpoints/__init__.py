"""
API endpoint modules.
"""
