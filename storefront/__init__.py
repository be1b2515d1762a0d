"""
Storefront API

Catalog, per-user cart and checkout over PostgreSQL (Supabase).
"""
__version__ = "1.0.0"
