"""
Subscription gating for Pro features.

This module provides:
1. Subscription state lookup from the stores table
2. FastAPI dependency for gating routes behind the Pro tier
3. Billing status route for the dashboard

Checkout and payment-provider webhooks live outside this service; they
only write stores.subscription_tier / subscription_status, which is what
we read here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from fastapi import APIRouter, Depends, Header, HTTPException

from conversion_app.core.db import get_conn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])


class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class StoreNotFoundError(Exception):
    """Raised when a store id has no row in the stores table"""
    pass


@dataclass(frozen=True)
class SubscriptionState:
    """Subscription of one store, loaded per request and passed explicitly."""
    store_id: str
    tier: SubscriptionTier = SubscriptionTier.FREE
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE

    @property
    def is_pro(self) -> bool:
        return self.tier == SubscriptionTier.PRO and self.status == SubscriptionStatus.ACTIVE

    def as_dict(self) -> Dict[str, Any]:
        return {
            "store_id": self.store_id,
            "tier": self.tier.value,
            "status": self.status.value,
            "is_pro": self.is_pro,
        }


def parse_subscription(store_id: str, tier: Any, status: Any) -> SubscriptionState:
    """
    Build a SubscriptionState from raw column values.
    Unknown or NULL values degrade to free / canceled rather than granting access.
    """
    try:
        tier_value = SubscriptionTier(tier) if tier is not None else SubscriptionTier.FREE
    except ValueError:
        logger.warning(f"Unknown subscription tier {tier!r} for store {store_id}")
        tier_value = SubscriptionTier.FREE
    try:
        status_value = SubscriptionStatus(status) if status is not None else SubscriptionStatus.ACTIVE
    except ValueError:
        logger.warning(f"Unknown subscription status {status!r} for store {store_id}")
        status_value = SubscriptionStatus.CANCELED
    return SubscriptionState(store_id=store_id, tier=tier_value, status=status_value)


# ============================================================================
# Core Billing Functions
# ============================================================================

async def get_subscription_state(store_id: str) -> SubscriptionState:
    """
    Read the subscription columns for a store.

    Raises:
        StoreNotFoundError: no such store
    """
    async with get_conn() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT subscription_tier, subscription_status
                FROM stores
                WHERE id = %s
                """,
                (store_id,)
            )
            row = await cur.fetchone()

    if not row:
        raise StoreNotFoundError(f"Store not found: {store_id}")
    return parse_subscription(store_id, row[0], row[1])


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def get_store_id(x_store_id: str = Header(...)) -> str:
    """
    Store id stamped on the request by the authenticating gateway.
    """
    store_id = x_store_id.strip()
    if not store_id:
        raise HTTPException(400, "Empty X-Store-Id header")
    return store_id


async def load_subscription(store_id: str = Depends(get_store_id)) -> SubscriptionState:
    try:
        return await get_subscription_state(store_id)
    except StoreNotFoundError:
        raise HTTPException(404, "Store not found")


async def require_pro_subscription(
    subscription: SubscriptionState = Depends(load_subscription),
) -> SubscriptionState:
    """
    Gate a route behind an active Pro subscription.

    Raises:
        HTTPException: 402 if the store is on the free tier or its Pro plan lapsed
    """
    if not subscription.is_pro:
        logger.warning(
            f"Pro feature denied for store {subscription.store_id}: "
            f"tier={subscription.tier.value}, status={subscription.status.value}"
        )
        raise HTTPException(
            status_code=402,
            detail={
                "error": "subscription_required",
                "message": "This feature requires an active Pro subscription",
                "tier": subscription.tier.value,
                "status": subscription.status.value,
            }
        )
    return subscription


# ============================================================================
# API Routes
# ============================================================================

@router.get("/status")
async def billing_status(subscription: SubscriptionState = Depends(load_subscription)):
    """
    Subscription status for the requesting store.

    Returns:
        {"store_id": str, "tier": "free"|"pro", "status": str, "is_pro": bool}
    """
    return subscription.as_dict()
