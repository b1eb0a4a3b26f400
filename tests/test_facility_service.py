import pytest

from pms.application.services.facility_service import lot_numbers_for
from pms.domain.common import ParkingStatus
from pms.domain.exceptions import ValidationError, NotFoundError, ConflictError


def test_lot_numbers_for():
    assert lot_numbers_for("B2", 3) == ["B2-1", "B2-2", "B2-3"]


async def test_create_facility_provisions_lots(facility_service):
    created = await facility_service.create_facility(parking_code=" B2 ", total_spaces=4, fee_per_hour=80.0)

    assert created.parking.parking_code == "B2"
    assert created.parking.total_spaces == 4
    assert created.parking.available_spaces == 4
    assert created.parking.status == ParkingStatus.AVAILABLE
    assert [lot.lot_number for lot in created.lots] == ["B2-1", "B2-2", "B2-3", "B2-4"]
    assert all(not lot.is_occupied for lot in created.lots)


async def test_create_facility_defaults(facility_service, test_settings):
    created = await facility_service.create_facility(parking_code="D1", total_spaces=1)
    assert created.parking.name == test_settings.DEFAULT_PARKING_NAME
    assert created.parking.location == test_settings.DEFAULT_LOCATION
    assert created.parking.fee_per_hour == test_settings.DEFAULT_FEE_PER_HOUR


async def test_create_facility_duplicate_code(facility_service, parking):
    with pytest.raises(ConflictError, match="already exists"):
        await facility_service.create_facility(parking_code="P1", total_spaces=2)


@pytest.mark.parametrize("code, spaces, fee", [("", 2, None), ("X", 0, None), ("X", -1, None), ("X", 2, 0)])
async def test_create_facility_validation(facility_service, code, spaces, fee):
    with pytest.raises(ValidationError):
        await facility_service.create_facility(parking_code=code, total_spaces=spaces, fee_per_hour=fee)


async def test_list_facilities_paginates(facility_service):
    for n in range(1, 6):
        await facility_service.create_facility(parking_code=f"L{n}", total_spaces=1, name=f"Lot {n}")

    page = await facility_service.list_facilities(page=2, limit=2)
    assert [p.parking_code for p in page.parkings] == ["L3", "L4"]
    assert page.meta == {"total": 5, "last_page": 3, "current_page": 2, "per_page": 2, "prev": 1, "next": 3}
    assert page.search_key is None


async def test_list_facilities_search(facility_service, parking):
    await facility_service.create_facility(parking_code="Z9", total_spaces=1, location="Riverside")

    page = await facility_service.list_facilities(search_key=" river ")
    assert [p.parking_code for p in page.parkings] == ["Z9"]
    assert page.meta["total"] == 1
    assert page.search_key == "river"


async def test_list_facilities_rejects_bad_page(facility_service):
    with pytest.raises(ValidationError):
        await facility_service.list_facilities(page=0)


async def test_get_facility_with_lots(facility_service, parking):
    result = await facility_service.get_facility_with_lots(parking.id)
    assert result.parking.id == parking.id
    assert len(result.lots) == 3


async def test_get_facility_not_found(facility_service):
    with pytest.raises(NotFoundError):
        await facility_service.get_facility_with_lots(999)


async def test_list_available_lots(facility_service, session_service, parking, single_lot_parking, vehicle):
    await session_service.start_session(vehicle.id, parking.id)

    assert [lot.lot_number for lot in await facility_service.list_available_lots(parking.id)] == ["P1-2", "P1-3"]
    assert len(await facility_service.list_available_lots()) == 3


async def test_update_facility_keeps_unset_fields(facility_service, parking):
    updated = await facility_service.update_facility(parking.id, name="Uptown", fee_per_hour=120.0)

    assert updated.name == "Uptown"
    assert updated.fee_per_hour == 120.0
    assert updated.location == "Main street"
    assert updated.parking_code == "P1"
    assert updated.total_spaces == 3
    assert updated.available_spaces == 3


async def test_update_facility_code_conflict(facility_service, parking, single_lot_parking):
    with pytest.raises(ConflictError):
        await facility_service.update_facility(parking.id, parking_code="SOLO")


async def test_update_facility_not_found(facility_service):
    with pytest.raises(NotFoundError):
        await facility_service.update_facility(999, name="Nowhere")


async def test_delete_facility(facility_service, parking, uow):
    await facility_service.delete_facility(parking.id)

    async with uow:
        assert await uow.parkings.get_by_id(parking.id) is None
        assert await uow.lots.get_by_parking(parking.id) == []


async def test_delete_facility_with_history(facility_service, session_service, parking, vehicle, uow):
    started = await session_service.start_session(vehicle.id, parking.id)
    await session_service.end_session(started.session.id)

    await facility_service.delete_facility(parking.id)

    async with uow:
        assert await uow.sessions.get_by_id(started.session.id) is None
        assert await uow.bills.get_by_session(started.session.id) is None


async def test_delete_occupied_facility_is_refused(facility_service, session_service, parking, vehicle):
    await session_service.start_session(vehicle.id, parking.id)

    with pytest.raises(ConflictError, match="active sessions"):
        await facility_service.delete_facility(parking.id)

    result = await facility_service.get_facility_with_lots(parking.id)
    assert result.parking.available_spaces == 2


async def test_code_is_reusable_after_rename(facility_service, parking):
    await facility_service.update_facility(parking.id, parking_code="P9")

    created = await facility_service.create_facility(parking_code="P1", total_spaces=2)

    assert [lot.lot_number for lot in created.lots] == ["P1-1", "P1-2"]
    renamed = await facility_service.get_facility_with_lots(parking.id)
    assert renamed.parking.parking_code == "P9"
    assert len(renamed.lots) == 3


async def test_status_full_cannot_be_set(facility_service, parking):
    with pytest.raises(ValidationError):
        await facility_service.update_facility(parking.id, status=ParkingStatus.FULL)
    with pytest.raises(ValidationError):
        await facility_service.create_facility(parking_code="F1", total_spaces=1, status=ParkingStatus.FULL)


async def test_reopening_follows_free_spaces(facility_service, session_service, single_lot_parking, vehicle):
    await session_service.start_session(vehicle.id, single_lot_parking.id)

    closed = await facility_service.update_facility(single_lot_parking.id, status=ParkingStatus.MAINTENANCE)
    assert closed.status == ParkingStatus.MAINTENANCE

    reopened = await facility_service.update_facility(single_lot_parking.id, status=ParkingStatus.AVAILABLE)
    assert reopened.status == ParkingStatus.FULL
    assert reopened.available_spaces == 0
