"""
Repository Package
==================
Data access layer using the repository pattern.

Repositories are built per request context from one Supabase client:

    client = await create_supabase_client()
    repos = Repositories(client)
    result = await repos.orders.find_by_id(order_id)
"""

from typing import Any, Optional

from supabase import AsyncClient

from marketplace.repositories.base import BaseRepository, create_repository
from marketplace.repositories.orders import (
    OrdersRepository,
    OrderStatistics,
    ProviderOrderStatistics,
)
from marketplace.repositories.profiles import ProfilesRepository, ProfileStatistics
from marketplace.repositories.providers import ProvidersRepository, ProviderStatistics
from marketplace.repositories.results import (
    Err,
    Ok,
    PaginatedResult,
    RepositoryListResult,
    RepositoryResult,
)


class Repositories:
    """
    Entity repositories sharing one client.

    Args:
        client: Async Supabase client
        config: Optional settings object; ``default_page_size``,
            ``max_page_size`` and ``enforce_order_transitions`` are read from it
    """

    def __init__(self, client: AsyncClient, config: Optional[Any] = None):
        options = {}
        strict_transitions = False
        if config is not None:
            options = {
                "page_size": config.default_page_size,
                "max_page_size": config.max_page_size,
            }
            strict_transitions = config.enforce_order_transitions

        self.client = client
        self.orders = OrdersRepository(client, strict_transitions=strict_transitions, **options)
        self.providers = ProvidersRepository(client, **options)
        self.profiles = ProfilesRepository(client, **options)


__all__ = [
    "BaseRepository",
    "create_repository",
    "Repositories",
    "OrdersRepository",
    "OrderStatistics",
    "ProviderOrderStatistics",
    "ProvidersRepository",
    "ProviderStatistics",
    "ProfilesRepository",
    "ProfileStatistics",
    "Ok",
    "Err",
    "PaginatedResult",
    "RepositoryResult",
    "RepositoryListResult",
]
