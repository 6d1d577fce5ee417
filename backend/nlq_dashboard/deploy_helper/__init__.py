"""
Deployment helper service.
"""
