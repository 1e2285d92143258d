# infrastructure/vehicle_repository.py

from typing import Optional, List, Dict, Any

from garagedesk.core.domain import ImageKind, ImageRecord, VehicleCreate, VehicleStatus
from garagedesk.data.supabase_client import get_supabase_client, count_rows
from garagedesk.infrastructure.image_repository import attach_image


def list_vehicles(order_by: str = "created_at") -> List[Dict[str, Any]]:
    """
    All vehicles. Newest first when ordered by creation date,
    alphabetical otherwise (e.g. order_by="make" for pickers).
    """
    client = get_supabase_client()
    resp = (
        client.table("vehicles")
        .select("*")
        .order(order_by, desc=(order_by == "created_at"))
        .execute()
    )
    return resp.data or []


def fetch_vehicle(vehicle_id: int | str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    resp = (
        client.table("vehicles")
        .select("*")
        .eq("id", vehicle_id)
        .limit(1)
        .execute()
    )
    rows = resp.data or []
    return rows[0] if rows else None


def create_vehicle(vehicle: VehicleCreate) -> Dict[str, Any]:
    """
    Inserts a new vehicle with status 'pending'.
    If an image_url is given, it is recorded in the images table too.
    """
    client = get_supabase_client()

    payload = vehicle.model_dump(exclude={"image_url"}, exclude_none=True)
    payload["status"] = VehicleStatus.PENDING.value

    resp = client.table("vehicles").insert(payload).execute()
    rows = resp.data or []
    if not rows:
        raise RuntimeError("Vehicle insert returned no row.")

    created = rows[0]

    if vehicle.image_url:
        attach_image(
            ImageRecord(
                url=vehicle.image_url,
                kind=ImageKind.VEHICLE,
                vehicle_id=created["id"],
            )
        )

    return created


def update_vehicle_status(vehicle_id: int | str, status: VehicleStatus) -> Dict[str, Any]:
    client = get_supabase_client()
    resp = (
        client.table("vehicles")
        .update({"status": status.value})
        .eq("id", vehicle_id)
        .execute()
    )
    rows = resp.data or []
    if not rows:
        raise ValueError(f"Vehicle with id {vehicle_id} not found in 'vehicles' table.")
    return rows[0]


def count_vehicles() -> int:
    return count_rows("vehicles")


def list_vehicles_with_service_counts() -> List[Dict[str, Any]]:
    """
    Vehicles with an embedded service count, as returned by PostgREST:
    each row carries services=[{"count": n}].
    """
    client = get_supabase_client()
    resp = client.table("vehicles").select("*, services(count)").execute()
    return resp.data or []
