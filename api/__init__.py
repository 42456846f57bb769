"""
HTTP service for the database engine.
"""
