"""Database clients and utilities."""

from .supabase import create_supabase_client

__all__ = ["create_supabase_client"]
