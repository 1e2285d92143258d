# infrastructure/image_repository.py

from typing import Optional, List, Dict, Any

from garagedesk.core.domain import ImageRecord
from garagedesk.data.supabase_client import get_supabase_client


def attach_image(image: ImageRecord) -> Dict[str, Any]:
    """
    Records an already-uploaded image against a vehicle or a service.
    The upload itself happens client-side against Supabase storage.
    """
    if image.vehicle_id is None and image.service_id is None:
        raise ValueError("Image must reference a vehicle_id or a service_id.")

    payload = {
        "url": image.url,
        "type": image.kind.value,
        "vehicle_id": image.vehicle_id,
        "service_id": image.service_id,
        "caption": image.caption,
    }
    # only send the columns that are set
    payload = {k: v for k, v in payload.items() if v is not None}

    client = get_supabase_client()
    resp = client.table("images").insert(payload).execute()
    rows = resp.data or []
    return rows[0] if rows else payload


def list_images(
    vehicle_id: Optional[int | str] = None,
    service_id: Optional[int | str] = None,
) -> List[Dict[str, Any]]:
    client = get_supabase_client()

    q = client.table("images").select("*")
    if vehicle_id is not None:
        q = q.eq("vehicle_id", vehicle_id)
    if service_id is not None:
        q = q.eq("service_id", service_id)

    resp = q.order("created_at", desc=True).execute()
    return resp.data or []
