"""
API endpoint modules
"""
