# core/domain.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class VehicleStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"


class ServiceStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ImageKind(str, Enum):
    VEHICLE = "vehicle"
    SERVICE = "service"


class ChartKind(str, Enum):
    PIE = "pie"
    LINE = "line"
    BAR = "bar"
    AREA = "area"


# -----------------------------
# Vehicles
# -----------------------------
class VehicleCreate(BaseModel):
    make: str
    model: str
    year: int = Field(..., ge=1886)
    license_plate: str
    owner_name: str
    owner_phone: str
    notes: Optional[str] = None
    assigned_mechanic: Optional[str] = None
    # already-uploaded image, recorded in the images table
    image_url: Optional[str] = None


class Vehicle(BaseModel):
    id: int | str
    make: str
    model: str
    year: int
    license_plate: str
    owner_name: str
    owner_phone: str
    status: VehicleStatus = VehicleStatus.PENDING
    notes: Optional[str] = None
    assigned_mechanic: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VehicleSummary(BaseModel):
    """Vehicle columns embedded in a service row."""

    id: int | str
    make: str
    model: str
    license_plate: str
    image_url: Optional[str] = None


# -----------------------------
# Services
# -----------------------------
class ServiceCreate(BaseModel):
    vehicle_id: int | str
    service_type: str
    mechanic: Optional[str] = None
    cost: float = Field(0.0, ge=0)
    scheduled_date: Optional[datetime] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    technician_notes: Optional[str] = None
    image_url: Optional[str] = None


class Service(BaseModel):
    id: int | str
    vehicle_id: int | str
    service_type: str
    mechanic: Optional[str] = None
    cost: float = 0.0
    status: ServiceStatus = ServiceStatus.PENDING
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    technician_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    vehicle: Optional[VehicleSummary] = None


# -----------------------------
# Images
# -----------------------------
class ImageRecord(BaseModel):
    url: str
    kind: ImageKind
    vehicle_id: Optional[int | str] = None
    service_id: Optional[int | str] = None
    caption: Optional[str] = None


# -----------------------------
# Dashboard configuration
# -----------------------------
class ChartSpec(BaseModel):
    kind: ChartKind
    data_source: str
    title: str


class DashboardConfiguration(BaseModel):
    """
    A renderable dashboard layout.

    - layout: section names in display order
    - metrics: metric identifiers, unique, in insertion order
    - charts: chart descriptors in display order
    """

    layout: List[str] = Field(default_factory=list)
    metrics: List[str] = Field(default_factory=list)
    charts: List[ChartSpec] = Field(default_factory=list)

    def add_metric(self, metric: str) -> None:
        if metric not in self.metrics:
            self.metrics.append(metric)

    def add_chart(self, chart: ChartSpec) -> None:
        self.charts.append(chart)
