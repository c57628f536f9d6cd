"""
Tests for distance rule validation and the distance rule endpoints.

Covers range checks, overlap detection (half-open intervals), edit
exclusion and tenant isolation.
"""

import pytest
from sqlalchemy.exc import OperationalError

from pantabilen.app.core.exceptions import ConflictError, RangeError
from pantabilen.app.domain.pricing.distance_rules import (
    RuleCandidate, validate_distance_rule, find_matching_rule, format_distance_range
)
from pantabilen.app.models.enums import UserRole
from conftest import auth_headers


def rule(min_km, max_km, deduction=-500, id=None, tenant_id=1):
    return RuleCandidate(tenant_id=tenant_id, min_distance_km=min_km, max_distance_km=max_km, deduction_sek=deduction, id=id)


# TEST 1: Range checks
def test_negative_min_rejected():
    with pytest.raises(RangeError) as exc_info:
        validate_distance_rule(rule(-1, 10), [])
    assert exc_info.value.error_code == "ERR_RANGE_001"


def test_max_must_exceed_min():
    with pytest.raises(RangeError):
        validate_distance_rule(rule(20, 20), [])
    with pytest.raises(RangeError):
        validate_distance_rule(rule(20, 10), [])


def test_positive_deduction_rejected():
    with pytest.raises(RangeError):
        validate_distance_rule(rule(0, 20, deduction=100), [])


def test_zero_deduction_allowed():
    validate_distance_rule(rule(0, 20, deduction=0), [])


# TEST 2: Overlap
def test_touching_ranges_do_not_overlap():
    existing = [rule(0, 20, id=1)]
    validate_distance_rule(rule(20, 50), existing)


def test_overlapping_range_conflicts():
    existing = [rule(0, 20, id=1), rule(20, 50, id=2)]
    with pytest.raises(ConflictError) as exc_info:
        validate_distance_rule(rule(40, 60), existing)
    assert exc_info.value.details["conflicting_rule_id"] == 2
    assert exc_info.value.details["conflicting_range"] == "20-50 km"


def test_unbounded_rule_overlaps_everything_above_min():
    existing = [rule(50, None, id=3)]
    with pytest.raises(ConflictError):
        validate_distance_rule(rule(200, 300), existing)
    validate_distance_rule(rule(0, 50), existing)


def test_edit_excludes_itself():
    existing = [rule(0, 20, id=1), rule(20, 50, id=2)]
    validate_distance_rule(rule(20, 45, id=2), existing, exclude_id=2)


def test_other_tenants_rules_are_ignored():
    existing = [rule(0, 100, id=1, tenant_id=2)]
    validate_distance_rule(rule(10, 20, tenant_id=1), existing)


# TEST 3: Matching and labels
def test_find_matching_rule_half_open():
    rules = [rule(20, 50, deduction=-500, id=2), rule(0, 20, deduction=-250, id=1), rule(50, None, deduction=-1000, id=3)]
    assert find_matching_rule(rules, 0).id == 1
    assert find_matching_rule(rules, 19.99).id == 1
    assert find_matching_rule(rules, 20).id == 2
    assert find_matching_rule(rules, 50).id == 3
    assert find_matching_rule(rules, 500).id == 3
    assert find_matching_rule([rule(10, 20)], 5) is None


def test_format_distance_range():
    assert format_distance_range(rule(20, 50)) == "20-50 km"
    assert format_distance_range(rule(50, None)) == "50+ km"
    assert format_distance_range(rule(0.5, 7.5)) == "0.5-7.5 km"


# TEST 4: API
@pytest.mark.asyncio
async def test_create_and_list_rules(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/distance-rules"
    for payload in (
        {"min_distance_km": 20, "max_distance_km": 50, "deduction_sek": -500},
        {"min_distance_km": 0, "max_distance_km": 20, "deduction_sek": -250},
    ):
        response = await client.post(base, json=payload, headers=admin_headers)
        assert response.status_code == 201
    
    response = await client.get(base, headers=admin_headers)
    assert response.status_code == 200
    rules = response.json()
    assert [r["min_distance_km"] for r in rules] == [0, 20]
    assert rules[1]["range_label"] == "20-50 km"


@pytest.mark.asyncio
async def test_create_overlapping_rule_returns_409(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/distance-rules"
    await client.post(base, json={"min_distance_km": 0, "max_distance_km": 50, "deduction_sek": -250}, headers=admin_headers)
    
    response = await client.post(base, json={"min_distance_km": 40, "max_distance_km": 80, "deduction_sek": -500}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT_001"
    assert response.json()["message"] == "Denna regel överlappar med en befintlig regel"


@pytest.mark.asyncio
async def test_create_invalid_range_returns_422(client, tenant, admin_headers):
    response = await client.post(
        f"/v1/tenants/{tenant.id}/distance-rules",
        json={"min_distance_km": 10, "max_distance_km": 5, "deduction_sek": -250},
        headers=admin_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_RANGE_001"


@pytest.mark.asyncio
async def test_update_and_delete_rule(client, tenant, admin_headers):
    base = f"/v1/tenants/{tenant.id}/distance-rules"
    created = (await client.post(base, json={"min_distance_km": 0, "max_distance_km": 20, "deduction_sek": -250}, headers=admin_headers)).json()
    
    response = await client.put(
        f"{base}/{created['id']}",
        json={"min_distance_km": 0, "max_distance_km": 25, "deduction_sek": -300},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["max_distance_km"] == 25
    assert response.json()["deduction_sek"] == -300
    
    response = await client.delete(f"{base}/{created['id']}", headers=admin_headers)
    assert response.status_code == 204
    assert (await client.get(base, headers=admin_headers)).json() == []


@pytest.mark.asyncio
async def test_admin_cannot_touch_other_tenant(client, tenant, other_tenant, admin_headers):
    response = await client.get(f"/v1/tenants/{other_tenant.id}/distance-rules", headers=admin_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_role_denied(client, tenant):
    headers = auth_headers(UserRole.DRIVER, user_id=5, tenant_id=tenant.id)
    response = await client.get(f"/v1/tenants/{tenant.id}/distance-rules", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_token_rejected(client, tenant):
    response = await client.get(f"/v1/tenants/{tenant.id}/distance-rules")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_store_failure_on_update_returns_503(client, tenant, admin_headers, mocker):
    base = f"/v1/tenants/{tenant.id}/distance-rules"
    created = (await client.post(base, json={"min_distance_km": 0, "max_distance_km": 20, "deduction_sek": -250}, headers=admin_headers)).json()
    
    mocker.patch(
        "sqlalchemy.ext.asyncio.AsyncSession.commit",
        side_effect=OperationalError("COMMIT", {}, Exception("connection lost"))
    )
    response = await client.put(
        f"{base}/{created['id']}",
        json={"min_distance_km": 0, "max_distance_km": 30, "deduction_sek": -400},
        headers=admin_headers
    )
    assert response.status_code == 503
    assert response.json()["error_code"] == "ERR_PERSISTENCE_001"
    assert response.json()["message"] == "Kunde inte spara avståndsregeln"
    
    mocker.stopall()
    rules = (await client.get(base, headers=admin_headers)).json()
    assert rules[0]["max_distance_km"] == 20
    assert rules[0]["deduction_sek"] == -250
