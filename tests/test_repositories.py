import pytest

from garagedesk.core.domain import (
    ImageKind,
    ImageRecord,
    ServiceCreate,
    ServiceStatus,
    VehicleCreate,
    VehicleStatus,
)
from garagedesk.data import supabase_client
from garagedesk.data.supabase_client import count_rows, get_supabase_client
from garagedesk.infrastructure import image_repository, service_repository, vehicle_repository


def _vehicle_create(**overrides):
    data = dict(
        make="Toyota",
        model="Corolla",
        year=2015,
        license_plate="AB-123-CD",
        owner_name="Jane Doe",
        owner_phone="555-0100",
    )
    data.update(overrides)
    return VehicleCreate(**data)


# --- client ---

def test_missing_credentials_raise(monkeypatch):
    monkeypatch.setattr(supabase_client, "_supabase_client", None)
    monkeypatch.setattr(supabase_client, "SUPABASE_URL", None)

    with pytest.raises(RuntimeError, match="SUPABASE_URL"):
        get_supabase_client()


def test_count_rows_uses_exact_count(fake_supabase):
    fake_supabase.responses["vehicles"] = {"data": [{"id": 1}], "count": 12}

    assert count_rows("vehicles") == 12
    query = fake_supabase.queries_for("vehicles")[0]
    assert query.called("select") == [("select", ("id",), {"count": "exact"})]


def test_count_rows_falls_back_to_data_length(fake_supabase):
    fake_supabase.responses["services"] = {"data": [{"id": 1}, {"id": 2}], "count": None}
    assert count_rows("services") == 2


# --- vehicles ---

def test_list_vehicles_newest_first(fake_supabase):
    fake_supabase.responses["vehicles"] = {"data": [{"id": 2}, {"id": 1}]}

    assert vehicle_repository.list_vehicles() == [{"id": 2}, {"id": 1}]
    query = fake_supabase.queries_for("vehicles")[0]
    assert query.called("order") == [("order", ("created_at",), {"desc": True})]


def test_list_vehicles_by_make_is_ascending(fake_supabase):
    vehicle_repository.list_vehicles(order_by="make")
    query = fake_supabase.queries_for("vehicles")[0]
    assert query.called("order") == [("order", ("make",), {"desc": False})]


def test_fetch_vehicle_missing_returns_none(fake_supabase):
    assert vehicle_repository.fetch_vehicle(99) is None


def test_create_vehicle_sets_pending_status(fake_supabase):
    fake_supabase.responses["vehicles"] = {"data": [{"id": 7, "status": "pending"}]}

    created = vehicle_repository.create_vehicle(_vehicle_create())

    assert created["id"] == 7
    payload = fake_supabase.queries_for("vehicles")[0].called("insert")[0][1][0]
    assert payload["status"] == "pending"
    assert payload["make"] == "Toyota"
    assert "image_url" not in payload
    assert fake_supabase.queries_for("images") == []


def test_create_vehicle_with_image_records_it(fake_supabase):
    fake_supabase.responses["vehicles"] = {"data": [{"id": 7}]}
    fake_supabase.responses["images"] = {"data": [{"id": 1}]}

    vehicle_repository.create_vehicle(_vehicle_create(image_url="https://cdn/img.png"))

    image_payload = fake_supabase.queries_for("images")[0].called("insert")[0][1][0]
    assert image_payload == {"url": "https://cdn/img.png", "type": "vehicle", "vehicle_id": 7}


def test_create_vehicle_without_returned_row_fails(fake_supabase):
    with pytest.raises(RuntimeError):
        vehicle_repository.create_vehicle(_vehicle_create())


def test_update_vehicle_status_not_found(fake_supabase):
    with pytest.raises(ValueError, match="not found"):
        vehicle_repository.update_vehicle_status(5, VehicleStatus.DELIVERED)


def test_update_vehicle_status(fake_supabase):
    fake_supabase.responses["vehicles"] = {"data": [{"id": 5, "status": "delivered"}]}

    row = vehicle_repository.update_vehicle_status(5, VehicleStatus.DELIVERED)

    assert row["status"] == "delivered"
    query = fake_supabase.queries_for("vehicles")[0]
    assert query.called("update") == [("update", ({"status": "delivered"},), {})]
    assert query.called("eq") == [("eq", ("id", 5), {})]


# --- services ---

def test_list_services_joins_vehicle(fake_supabase):
    service_repository.list_services()
    query = fake_supabase.queries_for("services")[0]

    columns = query.called("select")[0][1][0]
    assert "vehicle:vehicle_id" in columns
    assert query.called("order") == [("order", ("scheduled_date",), {"desc": True})]


def test_create_service_serializes_dates(fake_supabase):
    fake_supabase.responses["services"] = {"data": [{"id": 3}]}
    fake_supabase.responses["images"] = {"data": [{"id": 9}]}

    service_repository.create_service(
        ServiceCreate(
            vehicle_id=7,
            service_type="Oil change",
            mechanic="Ana",
            cost=79.9,
            scheduled_date="2024-05-01T09:00:00Z",
            image_url="https://cdn/receipt.jpg",
        )
    )

    payload = fake_supabase.queries_for("services")[0].called("insert")[0][1][0]
    assert payload["status"] == "pending"
    assert payload["scheduled_date"].startswith("2024-05-01T09:00:00")
    assert "image_url" not in payload

    image_payload = fake_supabase.queries_for("images")[0].called("insert")[0][1][0]
    assert image_payload == {"url": "https://cdn/receipt.jpg", "type": "service", "service_id": 3}


def test_negative_cost_rejected():
    with pytest.raises(ValueError):
        ServiceCreate(vehicle_id=1, service_type="Oil change", cost=-1)


def test_complete_service_stamps_completed_date(fake_supabase):
    fake_supabase.responses["services"] = {"data": [{"id": 3}]}

    service_repository.update_service_status(3, ServiceStatus.COMPLETED)

    update = fake_supabase.queries_for("services")[0].called("update")[0][1][0]
    assert update["status"] == "completed"
    assert update["completed_date"] is not None


def test_reopen_service_clears_completed_date(fake_supabase):
    fake_supabase.responses["services"] = {"data": [{"id": 3}]}

    service_repository.update_service_status(3, ServiceStatus.IN_PROGRESS)

    update = fake_supabase.queries_for("services")[0].called("update")[0][1][0]
    assert update == {"status": "in_progress", "completed_date": None}


def test_update_service_status_not_found(fake_supabase):
    with pytest.raises(ValueError, match="not found"):
        service_repository.update_service_status(3, ServiceStatus.PENDING)


# --- images ---

def test_attach_image_requires_owner(fake_supabase):
    with pytest.raises(ValueError):
        image_repository.attach_image(ImageRecord(url="https://cdn/x.png", kind=ImageKind.VEHICLE))


def test_list_images_filters(fake_supabase):
    image_repository.list_images(service_id=4)
    query = fake_supabase.queries_for("images")[0]
    assert query.called("eq") == [("eq", ("service_id", 4), {})]
