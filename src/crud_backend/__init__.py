"""
CRUD Backend - items and users over HTTP, backed by PostgreSQL
"""

__version__ = "1.0.0"
