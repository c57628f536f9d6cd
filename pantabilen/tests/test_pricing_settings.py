"""
Tests for the pricing settings blob, its cache and its endpoints.
"""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from pantabilen.app.domain.pricing.settings import PricingSettings, default_pricing_settings
from pantabilen.app.services.pricing_cache import PricingSettingsCache
from pantabilen.app.services.pricing_settings_store import PricingSettingsStore
from conftest import MockRedis


BRACKET_KEYS = {
    "age_bonuses": {"0-4.99", "5-9.99", "10-14.99", "15-19.99", "20+"},
    "old_car_deduction": {"pre1990"},
    "distance_adjustments": {"dropoff_complete", "dropoff_incomplete", "0-20km", "20-50km", "50-75km", "75-100km", "100+km"},
    "parts_bonuses": {"engine_transmission_catalyst", "battery_wheels_other"},
    "fuel_adjustments": {"gasoline", "ethanol", "electric", "other"},
}


# TEST 1: Blob shape
def test_blob_uses_bracket_labels():
    blob = default_pricing_settings().to_blob()
    assert {section: set(values) for section, values in blob.items()} == BRACKET_KEYS


def test_blob_round_trip_preserves_values():
    settings = default_pricing_settings().with_section("age_bonuses", {"5-9.99": 4200, "20+": 10})
    reloaded = PricingSettings.from_blob(json.loads(json.dumps(settings.to_blob())))
    assert reloaded == settings
    assert reloaded.age_bonuses.age_5_to_10 == 4200


def test_missing_sections_fall_back_to_defaults():
    settings = PricingSettings.from_blob({"parts_bonuses": {"engine_transmission_catalyst": 2000, "battery_wheels_other": 0}})
    assert settings.parts_bonuses.engine_transmission_catalyst == 2000
    assert settings.age_bonuses == default_pricing_settings().age_bonuses


@pytest.mark.parametrize("section,values", [
    ("age_bonuses", {"5-9.99": -1}),
    ("age_bonuses", {"0-4.99": 20001}),
    ("old_car_deduction", {"pre1990": 100}),
    ("distance_adjustments", {"20-50km": 10}),
    ("distance_adjustments", {"dropoff_complete": 5001}),
    ("fuel_adjustments", {"other": -1001}),
    ("fuel_adjustments", {"gasoline": -100}),
])
def test_out_of_range_values_rejected(section, values):
    with pytest.raises(PydanticValidationError):
        default_pricing_settings().with_section(section, values)


def test_unknown_section_rejected():
    with pytest.raises(KeyError):
        default_pricing_settings().with_section("towing", {})


def test_section_update_merges_into_current_values():
    customised = default_pricing_settings().with_section("age_bonuses", {"0-4.99": 12000})
    updated = customised.with_section("age_bonuses", {"5-9.99": 7000})
    assert updated.age_bonuses.age_0_to_5 == 12000
    assert updated.age_bonuses.age_5_to_10 == 7000


def test_section_update_accepts_field_names():
    updated = default_pricing_settings().with_section("old_car_deduction", {"before_1990": -1500})
    assert updated.to_blob()["old_car_deduction"] == {"pre1990": -1500}


# TEST 2: Cache
@pytest.mark.asyncio
async def test_cache_stores_with_ttl():
    redis = MockRedis()
    cache = PricingSettingsCache(redis, ttl_seconds=60)
    await cache.set(7, default_pricing_settings())
    assert redis.expiry["pricing:settings:7"] == 60
    assert await cache.get(7) == default_pricing_settings()


def test_cache_rejects_zero_ttl():
    with pytest.raises(ValueError):
        PricingSettingsCache(MockRedis(), ttl_seconds=0)


@pytest.mark.asyncio
async def test_cache_errors_are_misses():
    redis = MockRedis()
    redis.down = True
    cache = PricingSettingsCache(redis)
    assert await cache.get(1) is None
    await cache.set(1, default_pricing_settings())
    await cache.invalidate(1)


@pytest.mark.asyncio
async def test_settings_served_while_redis_down(client, tenant, admin_headers, redis_client_session):
    base = f"/v1/tenants/{tenant.id}/pricing/settings"
    redis_client_session.down = True
    
    response = await client.put(f"{base}/old_car_deduction", json={"pre1990": -1500}, headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get(base, headers=admin_headers)).json()["old_car_deduction"]["pre1990"] == -1500
    
    health = (await client.get("/health")).json()
    assert health["redis"] == "down"


@pytest.mark.asyncio
async def test_store_save_invalidates_cache(db_session, tenant):
    redis = MockRedis()
    store = PricingSettingsStore(db_session, PricingSettingsCache(redis))
    
    await store.load(tenant.id)
    assert await redis.exists(PricingSettingsCache.key(tenant.id))
    
    updated = default_pricing_settings().with_section("old_car_deduction", {"pre1990": -2000})
    await store.save(tenant.id, updated, updated_by=1)
    assert not await redis.exists(PricingSettingsCache.key(tenant.id))
    
    assert (await store.load(tenant.id)).old_car_deduction.before_1990 == -2000


# TEST 3: API
@pytest.mark.asyncio
async def test_get_returns_defaults_before_first_save(client, tenant, admin_headers):
    response = await client.get(f"/v1/tenants/{tenant.id}/pricing/settings", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == default_pricing_settings().to_blob()


@pytest.mark.asyncio
async def test_save_section_keeps_other_sections(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/pricing/settings"
    response = await client.put(f"{base}/age_bonuses", json={
        "0-4.99": 9000, "5-9.99": 4000, "10-14.99": 2000, "15-19.99": 800, "20+": 0
    }, headers=admin_headers)
    assert response.status_code == 200
    
    data = (await client.get(base, headers=admin_headers)).json()
    assert data["age_bonuses"]["5-9.99"] == 4000
    assert data["distance_adjustments"] == default_pricing_settings().to_blob()["distance_adjustments"]


@pytest.mark.asyncio
async def test_partial_section_save_keeps_saved_values(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/pricing/settings"
    await client.put(f"{base}/age_bonuses", json={"0-4.99": 12000}, headers=admin_headers)
    
    response = await client.put(f"{base}/age_bonuses", json={"5-9.99": 7000}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["age_bonuses"]["0-4.99"] == 12000
    assert response.json()["age_bonuses"]["5-9.99"] == 7000
    
    data = (await client.get(base, headers=admin_headers)).json()
    assert data["age_bonuses"] == {"0-4.99": 12000, "5-9.99": 7000, "10-14.99": 2500, "15-19.99": 1000, "20+": 0}


@pytest.mark.asyncio
async def test_save_section_out_of_range_returns_422(client, tenant, admin_headers):
    response = await client.put(
        f"/v1/tenants/{tenant.id}/pricing/settings/fuel_adjustments",
        json={"other": 250},
        headers=admin_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION_001"


@pytest.mark.asyncio
async def test_save_unknown_section_returns_404(client, tenant, admin_headers):
    response = await client.put(f"/v1/tenants/{tenant.id}/pricing/settings/towing", json={}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_save_whole_blob_out_of_range_returns_422(client, tenant, admin_headers):
    blob = default_pricing_settings().to_blob()
    blob["distance_adjustments"]["0-20km"] = 300
    response = await client.put(f"/v1/tenants/{tenant.id}/pricing/settings", json=blob, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_save_refreshes_cached_copy(client, tenant, admin_headers, redis_client_session):
    base = f"/v1/tenants/{tenant.id}/pricing/settings"
    await client.get(base, headers=admin_headers)
    assert await redis_client_session.exists(PricingSettingsCache.key(tenant.id))
    
    await client.put(f"{base}/old_car_deduction", json={"pre1990": -3000}, headers=admin_headers)
    data = (await client.get(base, headers=admin_headers)).json()
    assert data["old_car_deduction"]["pre1990"] == -3000


@pytest.mark.asyncio
async def test_reset_restores_defaults(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/pricing/settings"
    await client.put(f"{base}/old_car_deduction", json={"pre1990": -3000}, headers=admin_headers)
    
    response = await client.post(f"{base}/reset", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == default_pricing_settings().to_blob()
