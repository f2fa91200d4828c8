"""
Cached Web Server

A small static-file HTTP server built with Python asyncio. Repeated
requests for the same resource are answered from a bounded, recency
ordered in-memory cache instead of re-reading the file from disk.
"""

__version__ = "1.0.0"
