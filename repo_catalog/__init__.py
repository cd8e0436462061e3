"""
Repository catalog fetcher.

Normalizes Git repository references, keeps a local cache of working
copies, locates and validates the catalog directory inside each
repository, and validates user configured source lists.
"""

__version__ = "1.0.0"
__author__ = "Repository Catalog"
