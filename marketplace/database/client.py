"""
Supabase Client
===============
Builds the async Supabase client the repositories talk to.

One client is created per request context and handed to ``Repositories``;
nothing here is cached at module level.
"""

from typing import Optional

from supabase import AsyncClient, acreate_client

from marketplace.core.exceptions import ClientConfigurationError
from marketplace.core.logging import get_logger

logger = get_logger(__name__)


def _validate_configuration(url: Optional[str], key: Optional[str]) -> None:
    """
    Validate required client configuration.

    Raises:
        ClientConfigurationError: If URL or key is missing
    """
    if not url:
        raise ClientConfigurationError(
            message="SUPABASE_URL is required but not configured",
            details={"missing_field": "supabase_url"}
        )

    if not key:
        raise ClientConfigurationError(
            message="SUPABASE_KEY is required but not configured",
            details={"missing_field": "supabase_key"}
        )


async def create_supabase_client(
    supabase_url: Optional[str] = None,
    supabase_key: Optional[str] = None,
    service_role: bool = False,
) -> AsyncClient:
    """
    Create an async Supabase client.

    Args:
        supabase_url: Supabase project URL (defaults to settings)
        supabase_key: API key (defaults to the anon key, or the service key
            when ``service_role`` is set)
        service_role: Use the service role key from settings

    Returns:
        Connected ``AsyncClient``

    Raises:
        ClientConfigurationError: If configuration is missing or the client
            cannot be created
    """
    if supabase_url is None or supabase_key is None:
        # settings validates the environment on first import
        from marketplace.core.config import settings

        supabase_url = supabase_url or settings.supabase_url
        if supabase_key is None:
            supabase_key = settings.supabase_service_key if service_role else settings.supabase_key

    _validate_configuration(supabase_url, supabase_key)

    try:
        client = await acreate_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {str(e)}")
        raise ClientConfigurationError(
            message=f"Failed to initialize Supabase client: {str(e)}",
            details={"error": str(e)}
        ) from e

    logger.info(f"Supabase client initialized for {supabase_url}")
    return client
