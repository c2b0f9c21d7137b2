"""
Marketplace data-access layer: typed repositories over Supabase for orders,
providers and profiles.
"""

__version__ = "1.0.0"
