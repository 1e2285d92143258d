# infrastructure/service_repository.py

from datetime import datetime, timezone
from typing import List, Dict, Any

from garagedesk.core.domain import ImageKind, ImageRecord, ServiceCreate, ServiceStatus
from garagedesk.data.supabase_client import get_supabase_client, count_rows
from garagedesk.infrastructure.image_repository import attach_image

SERVICE_WITH_VEHICLE = (
    "id, vehicle_id, service_type, mechanic, cost, status, scheduled_date, "
    "completed_date, description, notes, technician_notes, created_at, updated_at, "
    "vehicle:vehicle_id (id, make, model, license_plate, image_url)"
)


def list_services() -> List[Dict[str, Any]]:
    """
    All services with a summary of their vehicle, latest scheduled first.
    """
    client = get_supabase_client()
    resp = (
        client.table("services")
        .select(SERVICE_WITH_VEHICLE)
        .order("scheduled_date", desc=True)
        .execute()
    )
    return resp.data or []


def list_services_for_vehicle(vehicle_id: int | str) -> List[Dict[str, Any]]:
    client = get_supabase_client()
    resp = (
        client.table("services")
        .select("*")
        .eq("vehicle_id", vehicle_id)
        .order("scheduled_date", desc=True)
        .execute()
    )
    return resp.data or []


def create_service(service: ServiceCreate) -> Dict[str, Any]:
    """
    Inserts a service with status 'pending' (covers both "add" and "schedule").
    If an image_url is given, it is recorded in the images table too.
    """
    client = get_supabase_client()

    payload = service.model_dump(mode="json", exclude={"image_url"}, exclude_none=True)
    payload["status"] = ServiceStatus.PENDING.value

    resp = client.table("services").insert(payload).execute()
    rows = resp.data or []
    if not rows:
        raise RuntimeError("Service insert returned no row.")

    created = rows[0]

    if service.image_url:
        attach_image(
            ImageRecord(
                url=service.image_url,
                kind=ImageKind.SERVICE,
                service_id=created["id"],
            )
        )

    return created


def update_service_status(service_id: int | str, status: ServiceStatus) -> Dict[str, Any]:
    """
    Moves a service to `status`. completed_date is stamped when the service
    is completed and cleared for any other status.
    """
    client = get_supabase_client()

    completed_date = (
        datetime.now(timezone.utc).isoformat()
        if status == ServiceStatus.COMPLETED
        else None
    )

    resp = (
        client.table("services")
        .update({"status": status.value, "completed_date": completed_date})
        .eq("id", service_id)
        .execute()
    )
    rows = resp.data or []
    if not rows:
        raise ValueError(f"Service with id {service_id} not found in 'services' table.")
    return rows[0]


def count_services() -> int:
    return count_rows("services")
