"""
Pricing engine.

Caller-facing price operations over an injected override repository:

* set_price         - save one (product type, variant) price
* get_active_price  - current price of a pair, or None when never priced
* bulk_set_margin   - re-derive sale prices of a filtered catalog slice

Writes go through the repository's compare-and-swap append. A conflicting
concurrent write is retried against a fresh read up to
OVERRIDE_WRITE_RETRIES times before OverrideConflictError reaches the caller.
Successful writes are announced on a PriceEventBus.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from fastapi import Depends
from sqlalchemy.orm import Session

from pricebook.core.config import Settings, settings as default_settings
from pricebook.core.database import get_db
from pricebook.core.exceptions import (
    MarginConfirmationRequired,
    OverrideConflictError,
    UnknownProductError,
)
from pricebook.services.catalog import Catalog, ProductType, get_catalog
from pricebook.services.override_store import (
    BulkResult,
    OverrideRepository,
    Pair,
    PriceOverrideInput,
    PriceOverrideRecord,
    apply_price_override,
    bulk_apply_margin,
    get_active_price,
)
from pricebook.services.price_override_repository import SqlOverrideRepository
from pricebook.services.pricing import (
    MarginAssessment,
    MarginThresholds,
    assess_margin,
    derive_margin_from_prices,
    derive_sale_price,
    validate_cost,
    validate_margin,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Events
# ============================================================================

@dataclass(frozen=True)
class PriceUpdateEvent:
    pairs: List[Pair]
    updated_by: str


Listener = Callable[[PriceUpdateEvent], None]


class PriceEventBus:
    """Explicit publish/subscribe channel for price changes"""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: PriceUpdateEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Price update listener %r failed", listener)


price_events = PriceEventBus()


# ============================================================================
# Scope filter
# ============================================================================

@dataclass(frozen=True)
class ScopeFilter:
    """Either one product type, or a service type optionally narrowed by a search term"""
    product_type_id: Optional[str] = None
    service_type_id: Optional[str] = None
    search: Optional[str] = None


@dataclass
class SetPriceResult:
    record: PriceOverrideRecord
    assessment: MarginAssessment
    replaced: Optional[PriceOverrideRecord] = None
    warnings: List[str] = field(default_factory=list)


class PricingEngine:
    """Price operations for one unit of work"""

    def __init__(
        self,
        repository: OverrideRepository,
        catalog: Catalog,
        config: Optional[Settings] = None,
        events: Optional[PriceEventBus] = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.config = config or default_settings
        self.events = events if events is not None else price_events
        self.thresholds = MarginThresholds.from_settings(self.config)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_active_price(self, product_type_id: str, variant_id: str) -> Optional[PriceOverrideRecord]:
        return get_active_price(self.repository.query_by_pair(product_type_id, variant_id), product_type_id, variant_id)

    def price_history(self, product_type_id: str, variant_id: str) -> List[PriceOverrideRecord]:
        """All records for a pair, newest first."""
        records = self.repository.query_by_pair(product_type_id, variant_id)
        return sorted(reversed(records), key=lambda r: r.last_updated, reverse=True)

    # ------------------------------------------------------------------
    # Single edit
    # ------------------------------------------------------------------

    def _require_variant(self, product_type_id: str, variant_id: str) -> None:
        if self.catalog.get_variant(product_type_id, variant_id) is None:
            raise UnknownProductError(product_type_id, variant_id)

    def set_price(
        self,
        product_type_id: str,
        variant_id: str,
        cost_price: float,
        unit_price: Optional[float] = None,
        margin: Optional[float] = None,
        updated_by: str = "system",
        confirmed: bool = False,
        currency: Optional[str] = None,
    ) -> SetPriceResult:
        """
        Save a price for one pair from its cost and either a sale price or a margin.

        Raises before writing anything when the pair is unknown, cost or
        margin is invalid, or the margin needs confirmation that was not given.
        """
        self._require_variant(product_type_id, variant_id)
        cost = validate_cost(cost_price)

        if (unit_price is None) == (margin is None):
            raise ValueError("Provide exactly one of unit_price or margin")

        if margin is not None:
            margin = validate_margin(margin)
            sale = derive_sale_price(cost, margin)
        else:
            sale = validate_cost(unit_price, field="unit_price")
            margin = derive_margin_from_prices(sale, cost)

        assessment = assess_margin(margin, self.thresholds)
        if assessment.requires_confirmation and not confirmed:
            raise MarginConfirmationRequired(margin, self.thresholds.confirmation)

        new_input = PriceOverrideInput(
            product_type_id=product_type_id,
            variant_id=variant_id,
            unit_price=sale,
            cost_price=cost,
            margin=margin,
            updated_by=updated_by,
            currency=currency or self.config.DEFAULT_CURRENCY,
        )
        record, replaced = self._write_with_retry(new_input)

        logger.info(
            "Price set for %s/%s by %s: cost=%s sale=%s margin=%.2f%%",
            product_type_id, variant_id, updated_by, cost, sale, margin,
        )
        self.events.publish(PriceUpdateEvent(pairs=[record.pair], updated_by=updated_by))

        warnings = [assessment.message] if assessment.message else []
        return SetPriceResult(record=record, assessment=assessment, replaced=replaced, warnings=warnings)

    def _write_with_retry(self, new_input: PriceOverrideInput):
        attempts = self.config.OVERRIDE_WRITE_RETRIES
        for attempt in range(1, attempts + 1):
            current = self.repository.query_by_pair(new_input.product_type_id, new_input.variant_id)
            active = get_active_price(current, new_input.product_type_id, new_input.variant_id)
            stamped = apply_price_override(current, new_input)[-1]
            try:
                return self.repository.append(stamped, expected_active_id=active.id if active else None), active
            except OverrideConflictError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Concurrent update on %s/%s, retrying (%d/%d)",
                    new_input.product_type_id, new_input.variant_id, attempt, attempts,
                )

    # ------------------------------------------------------------------
    # Bulk rewrite
    # ------------------------------------------------------------------

    def resolve_scope(self, scope_filter: ScopeFilter) -> List[ProductType]:
        if scope_filter.product_type_id:
            product_type = self.catalog.get_product_type(scope_filter.product_type_id)
            if product_type is None:
                raise UnknownProductError(scope_filter.product_type_id)
            return [product_type]
        return self.catalog.filter_product_types(scope_filter.service_type_id, scope_filter.search)

    def bulk_set_margin(
        self,
        target_margin: float,
        scope: Sequence[ProductType],
        updated_by: str = "system",
    ) -> BulkResult:
        """
        Apply ``target_margin`` to every priced variant in ``scope``.

        The whole batch is planned in memory first, then each new record is
        written independently. A variant whose active record changed since
        the plan is re-derived from the fresh record; one that lost its cost
        in the meantime is reported as skipped.
        """
        margin = validate_margin(target_margin)
        if not scope:
            return BulkResult(store=self.repository.list_all(), created=[], skipped=[])

        snapshot = self.repository.list_all()
        plan = bulk_apply_margin(snapshot, margin, scope, updated_by=updated_by)

        created: List[PriceOverrideRecord] = []
        skipped: List[Pair] = list(plan.skipped)
        for planned in plan.created:
            previous = get_active_price(snapshot, *planned.pair)
            try:
                created.append(self.repository.append(planned, expected_active_id=previous.id))
            except OverrideConflictError:
                logger.warning("Concurrent update on %s/%s during bulk margin, re-deriving", *planned.pair)
                record = self._rederive(planned.pair, margin, updated_by)
                if record is None:
                    skipped.append(planned.pair)
                else:
                    created.append(record)

        logger.info(
            "Bulk margin %.2f%% by %s: %d updated, %d skipped",
            margin, updated_by, len(created), len(skipped),
        )
        if created:
            self.events.publish(PriceUpdateEvent(pairs=[r.pair for r in created], updated_by=updated_by))

        return BulkResult(store=self.repository.list_all(), created=created, skipped=skipped)

    def _rederive(self, pair: Pair, margin: float, updated_by: str) -> Optional[PriceOverrideRecord]:
        active = self.get_active_price(*pair)
        if active is None or not active.cost_price > 0:
            return None
        record, _ = self._write_with_retry(PriceOverrideInput(
            product_type_id=pair[0],
            variant_id=pair[1],
            unit_price=derive_sale_price(active.cost_price, margin),
            cost_price=active.cost_price,
            margin=margin,
            updated_by=updated_by,
            currency=active.currency,
        ))
        return record


def get_pricing_engine(
    db: Session = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
) -> PricingEngine:
    """FastAPI dependency: an engine bound to the request's database session."""
    return PricingEngine(SqlOverrideRepository(db), catalog)
