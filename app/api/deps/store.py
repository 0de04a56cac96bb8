import structlog
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.store import Store
from app.repositories.availability import SqlAvailabilityRepository
from app.services.availability import AvailabilityService
from app.services.booking import BookingService
from app.services.store_schedule import StoreScheduleService

logger = structlog.get_logger(__name__)


class StoreContext:
    """Store resolved from a public slug."""

    def __init__(self, store: Store):
        self.store = store
        self.store_id = store.id
        self.timezone = store.timezone
        self.is_active = store.is_active


async def get_public_store_context(
    slug: str, db: AsyncSession = Depends(get_db)
) -> StoreContext:
    """
    Resolve the store behind a public booking URL.

    Unknown and inactive stores are both reported as not found so the public
    API does not reveal deactivated stores.
    """
    result = await db.execute(select(Store).where(Store.slug == slug))
    store = result.scalar_one_or_none()

    if store is None or not store.is_active:
        logger.warning("Public store not found", slug=slug)
        raise ResourceNotFoundError("Store", slug)

    return StoreContext(store)


def get_availability_service(
    db: AsyncSession = Depends(get_db),
) -> AvailabilityService:
    return AvailabilityService(SqlAvailabilityRepository(db))


def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_schedule_service(db: AsyncSession = Depends(get_db)) -> StoreScheduleService:
    return StoreScheduleService(db)
