from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from garagedesk.config import CORS_ORIGINS
from garagedesk.api.schemas import (
    ConfigurationRequest,
    ContextClearedResponse,
    Customer,
    DashboardDataResponse,
    ServiceStatusUpdate,
    VehicleStatusUpdate,
    VehicleSummaryResponse,
)
from garagedesk.core.domain import (
    DashboardConfiguration,
    ImageRecord,
    Service,
    ServiceCreate,
    Vehicle,
    VehicleCreate,
)
from garagedesk.core.dashboard_rules import minimal_default_configuration
from garagedesk.infrastructure import service_repository, vehicle_repository
from garagedesk.infrastructure.image_repository import attach_image, list_images
from garagedesk.service.config_events import dashboard_updates
from garagedesk.service.configuration_advisor import (
    get_advisor,
    request_dashboard_configuration,
)
from garagedesk.service.customers import group_customers
from garagedesk.service.dashboard_data import build_dashboard_data, build_vehicle_summary

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="GarageDesk API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


# -----------------------------
# Dashboard
# -----------------------------
@app.post("/dashboard/configure", response_model=DashboardConfiguration)
def dashboard_configure(req: ConfigurationRequest):
    """
    Ask the configuration advisor for a dashboard layout.
    The result is also broadcast to every dashboard listener.
    """
    try:
        advisor = get_advisor()
    except Exception as e:
        raise _server_error("create configuration advisor", e)

    try:
        return request_dashboard_configuration(req.request, advisor=advisor)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _server_error("process configuration request", e)


@app.post("/dashboard/context/clear", response_model=ContextClearedResponse)
def dashboard_clear_context():
    get_advisor().clear_context()
    return ContextClearedResponse(cleared=True)


@app.get("/dashboard/configuration", response_model=DashboardConfiguration)
def dashboard_configuration():
    """
    Latest configuration broadcast, or the minimal default before any request.
    """
    return dashboard_updates.latest or minimal_default_configuration()


@app.post("/dashboard/data", response_model=DashboardDataResponse)
def dashboard_data(config: DashboardConfiguration):
    """
    Metric values and chart series for a configuration.
    """
    try:
        vehicles = vehicle_repository.list_vehicles()
        services = service_repository.list_services()
    except Exception as e:
        raise _server_error("load dashboard data", e)

    return build_dashboard_data(config, vehicles, services)


# -----------------------------
# Vehicles
# -----------------------------
@app.get("/vehicles", response_model=List[Vehicle])
def vehicles_list(order_by: str = "created_at"):
    if order_by not in ("created_at", "make"):
        raise HTTPException(status_code=400, detail="order_by must be 'created_at' or 'make'")
    try:
        return vehicle_repository.list_vehicles(order_by=order_by)
    except Exception as e:
        raise _server_error("list vehicles", e)


@app.post("/vehicles", status_code=201, response_model=Vehicle)
def vehicles_create(req: VehicleCreate):
    try:
        return vehicle_repository.create_vehicle(req)
    except Exception as e:
        raise _server_error("create vehicle", e)


@app.get("/vehicles/{vehicle_id}", response_model=Vehicle)
def vehicles_get(vehicle_id: str):
    try:
        vehicle = vehicle_repository.fetch_vehicle(vehicle_id)
    except Exception as e:
        raise _server_error("fetch vehicle", e)

    if vehicle is None:
        raise HTTPException(status_code=404, detail=f"Vehicle {vehicle_id} not found")
    return vehicle


@app.patch("/vehicles/{vehicle_id}/status", response_model=Vehicle)
def vehicles_update_status(vehicle_id: str, req: VehicleStatusUpdate):
    try:
        return vehicle_repository.update_vehicle_status(vehicle_id, req.status)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _server_error("update vehicle status", e)


@app.get("/vehicles/{vehicle_id}/services", response_model=List[Service])
def vehicles_services(vehicle_id: str):
    try:
        return service_repository.list_services_for_vehicle(vehicle_id)
    except Exception as e:
        raise _server_error("list vehicle services", e)


@app.get("/vehicles/{vehicle_id}/summary", response_model=VehicleSummaryResponse)
def vehicles_summary(vehicle_id: str):
    """
    Service mix, monthly cost trend and next pending services for one vehicle.
    """
    try:
        services = service_repository.list_services_for_vehicle(vehicle_id)
    except Exception as e:
        raise _server_error("load vehicle summary", e)

    return VehicleSummaryResponse(vehicle_id=vehicle_id, **build_vehicle_summary(services))


# -----------------------------
# Services
# -----------------------------
@app.get("/services", response_model=List[Service])
def services_list():
    try:
        return service_repository.list_services()
    except Exception as e:
        raise _server_error("list services", e)


@app.post("/services", status_code=201, response_model=Service)
def services_create(req: ServiceCreate):
    try:
        return service_repository.create_service(req)
    except Exception as e:
        raise _server_error("create service", e)


@app.patch("/services/{service_id}/status", response_model=Service)
def services_update_status(service_id: str, req: ServiceStatusUpdate):
    try:
        return service_repository.update_service_status(service_id, req.status)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _server_error("update service status", e)


# -----------------------------
# Images & customers
# -----------------------------
@app.post("/images", status_code=201)
def images_attach(req: ImageRecord) -> Dict[str, Any]:
    try:
        return attach_image(req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _server_error("attach image", e)


@app.get("/images")
def images_list(
    vehicle_id: Optional[str] = None,
    service_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Image records, newest first, optionally filtered by owner."""
    try:
        return list_images(vehicle_id=vehicle_id, service_id=service_id)
    except Exception as e:
        raise _server_error("list images", e)


@app.get("/customers", response_model=List[Customer])
def customers_list():
    try:
        vehicles = vehicle_repository.list_vehicles_with_service_counts()
    except Exception as e:
        raise _server_error("list customers", e)

    return group_customers(vehicles)
