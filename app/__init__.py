"""
Shopify Content Backend

A small API in front of the Shopify Admin REST API:
- Image upload from multipart forms into the store's CDN
- Product listing
- Connection validation and diagnostics
- Document parsing into sections
"""

__version__ = "1.0.0"
