# service/customers.py

from typing import Any, Dict, List


def _service_count(vehicle: Dict[str, Any]) -> int:
    """
    PostgREST returns an embedded count as [{"count": n}];
    a plain {"count": n} or a missing key is tolerated.
    """
    services = vehicle.get("services")
    if isinstance(services, list):
        return sum(int(s.get("count") or 0) for s in services)
    if isinstance(services, dict):
        return int(services.get("count") or 0)
    return 0


def group_customers(vehicles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Groups vehicle rows by owner (name + phone).

    Returns, in first-seen order:
      [{"name", "phone", "vehicles": [...], "total_services": int}]
    """
    customers: Dict[str, Dict[str, Any]] = {}

    for vehicle in vehicles:
        name = vehicle.get("owner_name")
        phone = vehicle.get("owner_phone")
        key = f"{name}|{phone}"

        if key not in customers:
            customers[key] = {
                "name": name,
                "phone": phone,
                "vehicles": [],
                "total_services": 0,
            }

        entry = customers[key]
        entry["vehicles"].append({k: v for k, v in vehicle.items() if k != "services"})
        entry["total_services"] += _service_count(vehicle)

    return list(customers.values())
