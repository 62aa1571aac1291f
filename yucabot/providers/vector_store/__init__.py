"""Vector-store provider implementations."""

from yucabot.providers.vector_store.supabase_provider import SupabaseVectorStore

__all__ = ["SupabaseVectorStore"]
