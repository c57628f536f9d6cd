"""
Tests for postal code coverage: the in-memory set, batched persistence and
the coverage endpoints.
"""

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from pantabilen.app.core.exceptions import PersistenceError
from pantabilen.app.domain.coverage.coverage_service import CoverageService
from pantabilen.app.domain.coverage.coverage_set import CoverageSet, RegionStatus, batched
from pantabilen.app.models.postal_code import PostalCode, TenantCoverageArea


# TEST 1: CoverageSet
def test_toggle_adds_then_removes():
    coverage = CoverageSet(tenant_id=1)
    assert coverage.toggle(10) is True
    assert 10 in coverage
    assert coverage.toggle(10) is False
    assert 10 not in coverage
    assert len(coverage) == 0


def test_select_region_adds_only_missing_codes():
    coverage = CoverageSet(tenant_id=1, selected={2}, catalog={"Stockholm": [1, 2, 3]})
    assert coverage.select_region("Stockholm") == [1, 3]
    assert coverage.pairs() == {(1, 1), (1, 2), (1, 3)}


def test_select_full_region_is_noop():
    coverage = CoverageSet(tenant_id=1, selected={1, 2, 3}, catalog={"Stockholm": [1, 2, 3]})
    assert coverage.select_region("Stockholm") == []
    assert len(coverage) == 3


def test_region_status_full_and_partial():
    coverage = CoverageSet(tenant_id=1, selected={1, 4}, catalog={"Stockholm": [1, 2], "Uppsala": [4]})
    stockholm = coverage.region_status("Stockholm")
    assert (stockholm.selected_count, stockholm.total_count) == (1, 2)
    assert stockholm.is_partial and not stockholm.is_full
    assert stockholm.percentage == 50.0
    assert coverage.region_status("Uppsala").is_full
    assert [s.region for s in coverage.all_region_statuses()] == ["Stockholm", "Uppsala"]


def test_empty_region_is_neither_full_nor_partial():
    status = RegionStatus(region="Gotland", selected_count=0, total_count=0)
    assert not status.is_full and not status.is_partial
    assert status.percentage == 0.0


def test_deselect_region_and_clear():
    coverage = CoverageSet(tenant_id=1, selected={1, 2, 9}, catalog={"Stockholm": [1, 2, 3]})
    assert coverage.deselect_region("Stockholm") == [1, 2]
    assert coverage.clear() == [9]
    assert len(coverage) == 0


def test_batched():
    assert [len(batch) for batch in batched(list(range(250)), 100)] == [100, 100, 50]
    assert list(batched([], 100)) == []
    with pytest.raises(ValueError):
        list(batched([1], 0))


# TEST 2: Service
@pytest.fixture
async def large_region(db_session):
    codes = [
        PostalCode(postal_code=f"{10000 + n}", city="Stockholm", region="Stockholm", country="Sweden")
        for n in range(250)
    ]
    db_session.add_all(codes)
    await db_session.commit()
    return codes


async def count_coverage(db_session, tenant_id):
    result = await db_session.execute(
        select(func.count()).select_from(TenantCoverageArea).where(TenantCoverageArea.tenant_id == tenant_id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_select_region_writes_in_batches(db_session, tenant, large_region):
    change = await CoverageService(db_session).select_region(tenant.id, "Stockholm")
    assert len(change.added) == 250
    assert change.batches == 3
    assert change.region_status.is_full
    assert await count_coverage(db_session, tenant.id) == 250
    
    again = await CoverageService(db_session).select_region(tenant.id, "Stockholm")
    assert again.added == []
    assert again.batches == 0
    assert again.message == "Alla postnummer i Stockholm är redan valda."


@pytest.mark.asyncio
async def test_custom_batch_size(db_session, tenant, large_region):
    change = await CoverageService(db_session, batch_size=50).select_region(tenant.id, "Stockholm")
    assert change.batches == 5


def test_zero_batch_size_rejected():
    with pytest.raises(ValueError):
        CoverageService(db=None, batch_size=0)


@pytest.mark.asyncio
async def test_failed_write_rolls_back_everything(db_session, tenant, large_region, mocker):
    service = CoverageService(db_session)
    mocker.patch.object(db_session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("connection lost")))
    
    with pytest.raises(PersistenceError):
        await service.select_region(tenant.id, "Stockholm")
    
    mocker.stopall()
    assert await count_coverage(db_session, tenant.id) == 0


# TEST 3: API
@pytest.mark.asyncio
async def test_toggle_endpoint(client, tenant, admin_headers, postal_codes):
    base = f"/v1/tenants/{tenant.id}/coverage"
    code_id = postal_codes[0].id
    
    response = await client.post(f"{base}/postal-codes/{code_id}/toggle", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["added"] == [code_id]
    assert (await client.get(base, headers=admin_headers)).json()["postal_code_ids"] == [code_id]
    
    response = await client.post(f"{base}/postal-codes/{code_id}/toggle", headers=admin_headers)
    assert response.json()["removed"] == [code_id]
    assert (await client.get(base, headers=admin_headers)).json()["total"] == 0


@pytest.mark.asyncio
async def test_toggle_inactive_code_returns_404(client, tenant, admin_headers, postal_codes):
    response = await client.post(
        f"/v1/tenants/{tenant.id}/coverage/postal-codes/{postal_codes[5].id}/toggle",
        headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_region_endpoints(client, tenant, admin_headers, postal_codes):
    base = f"/v1/tenants/{tenant.id}/coverage"
    await client.post(f"{base}/postal-codes/{postal_codes[3].id}/toggle", headers=admin_headers)
    
    statuses = {s["region"]: s for s in (await client.get(f"{base}/regions", headers=admin_headers)).json()}
    assert statuses["Uppsala"]["selected_count"] == 1
    assert statuses["Uppsala"]["total_count"] == 2
    assert statuses["Uppsala"]["is_partial"] is True
    assert statuses["Stockholm"]["selected_count"] == 0
    
    response = await client.post(f"{base}/regions/Stockholm", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["added_count"] == 3
    assert response.json()["region_status"]["is_full"] is True
    
    response = await client.post(f"{base}/regions/Stockholm", headers=admin_headers)
    assert response.json()["added_count"] == 0
    
    response = await client.delete(f"{base}/regions/Stockholm", headers=admin_headers)
    assert response.json()["removed_count"] == 3
    
    response = await client.delete(base, headers=admin_headers)
    assert response.json()["removed"] == [postal_codes[3].id]
    assert (await client.get(base, headers=admin_headers)).json()["total"] == 0


@pytest.mark.asyncio
async def test_unknown_region_returns_404(client, tenant, admin_headers, postal_codes):
    response = await client.post(f"/v1/tenants/{tenant.id}/coverage/regions/Atlantis", headers=admin_headers)
    assert response.status_code == 404
