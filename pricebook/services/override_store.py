"""
Price override store synchronisation.

A price override is never edited in place: saving a price appends a new
active record and flips every other record for the same
(product_type_id, variant_id) pair to inactive. History is kept forever.

The list functions here are pure (they return new lists and never mutate
their input). ``OverrideRepository`` is the seam used by the pricing engine
to persist the records they produce.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from pricebook.core.config import settings
from pricebook.core.exceptions import OverrideConflictError
from pricebook.services.catalog import ProductType
from pricebook.services.pricing import derive_sale_price, validate_margin

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]


@dataclass(frozen=True)
class PriceOverrideRecord:
    id: str
    product_type_id: str
    variant_id: str
    unit_price: float
    cost_price: float
    margin: float
    currency: str
    valid_from: datetime
    last_updated: datetime
    updated_by: str
    is_active: bool = True
    valid_until: Optional[datetime] = None

    @property
    def pair(self) -> Pair:
        return self.product_type_id, self.variant_id


@dataclass(frozen=True)
class PriceOverrideInput:
    """Fields supplied by the caller; id, flags and timestamps are stamped on apply."""
    product_type_id: str
    variant_id: str
    unit_price: float
    cost_price: float
    margin: float
    updated_by: str
    currency: Optional[str] = None

    @property
    def pair(self) -> Pair:
        return self.product_type_id, self.variant_id


@dataclass
class BulkResult:
    store: List[PriceOverrideRecord]
    created: List[PriceOverrideRecord]
    skipped: List[Pair]


def _new_id() -> str:
    return str(uuid.uuid4())


def stamp_record(
    new_record: PriceOverrideInput,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> PriceOverrideRecord:
    now = now or datetime.now(timezone.utc)
    return PriceOverrideRecord(
        id=(id_factory or _new_id)(),
        product_type_id=new_record.product_type_id,
        variant_id=new_record.variant_id,
        unit_price=new_record.unit_price,
        cost_price=new_record.cost_price,
        margin=new_record.margin,
        currency=new_record.currency or settings.DEFAULT_CURRENCY,
        valid_from=now,
        last_updated=now,
        updated_by=new_record.updated_by,
        is_active=True,
    )


def apply_price_override(
    store: Sequence[PriceOverrideRecord],
    new_record: PriceOverrideInput,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> List[PriceOverrideRecord]:
    """
    Return ``store`` with every record of the new record's pair deactivated
    and the freshly stamped record appended.

    All matching records are deactivated, not only the first active one, so a
    store that already holds two active records for a pair is repaired.
    """
    stamped = stamp_record(new_record, now=now, id_factory=id_factory)
    updated = [
        replace(record, is_active=False) if record.pair == stamped.pair and record.is_active else record
        for record in store
    ]
    updated.append(stamped)
    return updated


def get_active_price(
    store: Iterable[PriceOverrideRecord],
    product_type_id: str,
    variant_id: str,
) -> Optional[PriceOverrideRecord]:
    """First active record for the pair, or None if the pair was never priced."""
    return next(
        (
            record for record in store
            if record.product_type_id == product_type_id
            and record.variant_id == variant_id
            and record.is_active
        ),
        None,
    )


def bulk_apply_margin(
    store: Sequence[PriceOverrideRecord],
    target_margin: float,
    scope: Sequence[ProductType],
    updated_by: str = "system",
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> BulkResult:
    """
    Re-derive the sale price of every priced variant in ``scope`` at
    ``target_margin``, keeping each variant's cost price.

    The margin is validated before anything is touched. Variants without an
    active record or with a zero cost are skipped, never given a cost.
    """
    margin = validate_margin(target_margin)
    current = list(store)
    created: List[PriceOverrideRecord] = []
    skipped: List[Pair] = []

    for product_type in scope:
        for variant in product_type.variants:
            active = get_active_price(current, product_type.id, variant.id)
            if active is None or not active.cost_price > 0:
                logger.info("No cost price for %s/%s, skipping", product_type.id, variant.id)
                skipped.append((product_type.id, variant.id))
                continue

            current = apply_price_override(
                current,
                PriceOverrideInput(
                    product_type_id=product_type.id,
                    variant_id=variant.id,
                    unit_price=derive_sale_price(active.cost_price, margin),
                    cost_price=active.cost_price,
                    margin=margin,
                    updated_by=updated_by,
                    currency=active.currency,
                ),
                now=now,
                id_factory=id_factory,
            )
            created.append(current[-1])

    return BulkResult(store=current, created=created, skipped=skipped)


# ============================================================================
# Repository seam
# ============================================================================

class OverrideRepository(Protocol):
    """Persistence needed by the pricing engine"""

    def list_all(self) -> List[PriceOverrideRecord]:
        ...

    def query_by_pair(self, product_type_id: str, variant_id: str) -> List[PriceOverrideRecord]:
        ...

    def append(self, record: PriceOverrideRecord, expected_active_id: Optional[str]) -> PriceOverrideRecord:
        """
        Deactivate the pair's active records and insert ``record`` atomically.

        Raises OverrideConflictError when the pair's active record is no
        longer ``expected_active_id``.
        """
        ...


class InMemoryOverrideRepository:
    """List-backed repository; a lock makes the compare-and-swap atomic"""

    def __init__(self, records: Optional[Iterable[PriceOverrideRecord]] = None):
        self._records: List[PriceOverrideRecord] = list(records or [])
        self._lock = threading.Lock()

    def list_all(self) -> List[PriceOverrideRecord]:
        with self._lock:
            return list(self._records)

    def query_by_pair(self, product_type_id: str, variant_id: str) -> List[PriceOverrideRecord]:
        with self._lock:
            return [r for r in self._records if r.pair == (product_type_id, variant_id)]

    def append(self, record: PriceOverrideRecord, expected_active_id: Optional[str]) -> PriceOverrideRecord:
        with self._lock:
            active = get_active_price(self._records, record.product_type_id, record.variant_id)
            if (active.id if active else None) != expected_active_id:
                raise OverrideConflictError(record.product_type_id, record.variant_id, expected_active_id)

            self._records = [
                replace(r, is_active=False) if r.pair == record.pair and r.is_active else r
                for r in self._records
            ]
            self._records.append(record)
            return record
