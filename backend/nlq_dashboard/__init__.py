"""
NLQ Platform Dashboard.
"""
__version__ = "1.0.0"
