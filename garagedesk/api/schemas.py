from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from garagedesk.core.domain import ServiceStatus, VehicleStatus


class ConfigurationRequest(BaseModel):
    request: str


class ContextClearedResponse(BaseModel):
    cleared: bool


class ChartData(BaseModel):
    kind: str
    data_source: str
    title: str
    data: List[Dict[str, Any]]


class DashboardDataResponse(BaseModel):
    layout: List[str]
    metrics: Dict[str, Optional[float]]
    charts: List[ChartData]


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


class ServiceStatusUpdate(BaseModel):
    status: ServiceStatus


class VehicleSummaryResponse(BaseModel):
    vehicle_id: int | str
    service_distribution: List[Dict[str, Any]]
    cost_trend: List[Dict[str, Any]]
    upcoming_services: List[Dict[str, Any]]


class Customer(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    vehicles: List[Dict[str, Any]]
    total_services: int
