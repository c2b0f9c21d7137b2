from marketplace.database.client import create_supabase_client

__all__ = ["create_supabase_client"]
