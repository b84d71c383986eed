import pytest
from fastapi.testclient import TestClient

from conversion_app import billing
from conversion_app.app import app
from conversion_app.billing import StoreNotFoundError, SubscriptionState, SubscriptionStatus, SubscriptionTier

STORES = {
    "store-pro": (SubscriptionTier.PRO, SubscriptionStatus.ACTIVE),
    "store-free": (SubscriptionTier.FREE, SubscriptionStatus.ACTIVE),
    "store-lapsed": (SubscriptionTier.PRO, SubscriptionStatus.PAST_DUE),
}


@pytest.fixture
def client():
    # No context manager: the lifespan (and the pool) never starts.
    return TestClient(app)


@pytest.fixture(autouse=True)
def fake_stores(monkeypatch):
    """Serve subscription state from STORES instead of Postgres."""
    async def get_subscription_state(store_id):
        if store_id not in STORES:
            raise StoreNotFoundError(f"Store not found: {store_id}")
        tier, status = STORES[store_id]
        return SubscriptionState(store_id=store_id, tier=tier, status=status)

    monkeypatch.setattr(billing, "get_subscription_state", get_subscription_state)
