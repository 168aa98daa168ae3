"""FastAPI dependencies.

The snapshot manager is a process-wide singleton built from settings. Tests
swap it through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from zidrec.config import Settings, get_settings
from zidrec.recommender.engine import Recommender
from zidrec.recommender.provider import ZidClient
from zidrec.recommender.snapshot import SnapshotManager
from zidrec.recommender.store import JsonSnapshotStore


@lru_cache
def get_snapshot_manager() -> SnapshotManager:
    settings = get_settings()
    client = ZidClient(
        base_url=settings.ZID_API_URL,
        access_token=settings.resolve_access_token(),
        timeout=settings.REQUEST_TIMEOUT_S,
    )
    return SnapshotManager(
        store=JsonSnapshotStore(settings.CACHE_FILE),
        client=client,
        page_size=settings.FETCH_PAGE_SIZE,
    )


def get_recommender(
    manager: SnapshotManager = Depends(get_snapshot_manager),
    settings: Settings = Depends(get_settings),
) -> Recommender:
    """Recommender over the current snapshot, loading it on first use."""
    return Recommender(
        manager.ensure_loaded(),
        max_results=settings.MAX_RECOMMENDATIONS,
    )
