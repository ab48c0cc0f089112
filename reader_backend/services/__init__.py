"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection.

Usage in routes:
    from ..services import EntryServiceDep

    @router.get("/entries")
    async def list_entries(
        service: EntryServiceDep,
        user_id: Annotated[str, Depends(get_current_user)]
    ):
        return service.list_entries(user_id=user_id)
"""

from typing import Annotated

from fastapi import Depends

from ..config import get_db
from ..database import Database

from .entry_service import EntryService

__all__ = [
    # Services
    "EntryService",
    # Dependency factories
    "get_entry_service",
    # Type aliases for dependency injection
    "EntryServiceDep",
]


def get_entry_service(db: Annotated[Database, Depends(get_db)]) -> EntryService:
    """Dependency to get EntryService instance."""
    return EntryService(db=db)


EntryServiceDep = Annotated[EntryService, Depends(get_entry_service)]
