# service/dashboard_data.py

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

import pandas as pd

from garagedesk.core.domain import DashboardConfiguration, ServiceStatus

logger = logging.getLogger("uvicorn.error")

SERVICE_COLUMNS = [
    "id",
    "service_type",
    "mechanic",
    "cost",
    "status",
    "scheduled_date",
    "completed_date",
]

OPEN_STATUSES = (ServiceStatus.PENDING.value, ServiceStatus.IN_PROGRESS.value)
UPCOMING_LIMIT = 5


def _services_frame(services: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """
    Normalize raw Supabase service rows:
      - cost -> float (missing/invalid = 0)
      - scheduled_date / completed_date -> UTC timestamps (invalid = NaT)
    """
    df = pd.DataFrame(list(services), columns=SERVICE_COLUMNS)

    df["cost"] = pd.to_numeric(df["cost"], errors="coerce").fillna(0.0).astype(float)
    for col in ("scheduled_date", "completed_date"):
        df[col] = pd.to_datetime(df[col], errors="coerce", utc=True, format="ISO8601")

    return df


def _as_utc(now: Optional[datetime]) -> pd.Timestamp:
    ts = pd.Timestamp(now or datetime.now(timezone.utc))
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts


def _open_services(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["status"].isin(OPEN_STATUSES)]


def _completed_services(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["status"] == ServiceStatus.COMPLETED.value]


def _upcoming_frame(df: pd.DataFrame, now: pd.Timestamp) -> pd.DataFrame:
    """Pending services due strictly in the future, soonest first."""
    pending = df[
        (df["status"] == ServiceStatus.PENDING.value) & df["scheduled_date"].notna()
    ].copy()
    if pending.empty:
        return pending.assign(days=pd.Series(dtype=int))

    delta_days = (pending["scheduled_date"] - now).dt.total_seconds() / 86400
    pending["days"] = delta_days.map(math.ceil)
    pending = pending[pending["days"] > 0]
    return pending.sort_values("days", kind="stable")


def _monthly_totals(dates: pd.Series, costs: pd.Series) -> pd.Series:
    mask = dates.notna()
    if not mask.any():
        return pd.Series(dtype=float)
    months = dates[mask].dt.strftime("%Y-%m")
    return costs[mask].groupby(months).sum().sort_index()


# -----------------------------
# Metrics
# -----------------------------
def total_vehicles(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> int:
    return len(vehicles)


def active_services(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> int:
    return int(df["status"].isin(OPEN_STATUSES).sum())


def upcoming_services_count(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> int:
    return len(_upcoming_frame(df, now))


def total_revenue(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> float:
    return float(_completed_services(df)["cost"].sum())


def active_mechanics(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> int:
    return int(_open_services(df)["mechanic"].dropna().nunique())


def completion_rate(vehicles: List[Dict[str, Any]], df: pd.DataFrame, now: pd.Timestamp) -> float:
    """Percentage of services completed, one decimal."""
    if df.empty:
        return 0.0
    return round(100.0 * len(_completed_services(df)) / len(df), 1)


MetricFn = Callable[[List[Dict[str, Any]], pd.DataFrame, pd.Timestamp], Any]

METRICS: Dict[str, MetricFn] = {
    "total_vehicles": total_vehicles,
    "active_services": active_services,
    "upcoming_services": upcoming_services_count,
    "total_revenue": total_revenue,
    "active_mechanics": active_mechanics,
    "completion_rate": completion_rate,
}


# -----------------------------
# Chart data sources
# -----------------------------
def service_distribution(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    """Number of services and total cost per service type, in first-seen order."""
    typed = df.dropna(subset=["service_type"])
    if typed.empty:
        return []
    grouped = typed.groupby("service_type", sort=False)["cost"].agg(["size", "sum"])
    return [
        {"name": name, "value": int(row["size"]), "cost": float(row["sum"])}
        for name, row in grouped.iterrows()
    ]


def service_costs(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    totals = _monthly_totals(df["scheduled_date"], df["cost"])
    return [{"month": month, "cost": float(cost)} for month, cost in totals.items()]


def monthly_revenue(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    done = _completed_services(df)
    # services completed before completed_date was tracked fall back to their schedule
    dates = done["completed_date"].fillna(done["scheduled_date"])
    totals = _monthly_totals(dates, done["cost"])
    return [{"month": month, "revenue": float(rev)} for month, rev in totals.items()]


def mechanic_workload(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    assigned = _open_services(df).dropna(subset=["mechanic"])
    if assigned.empty:
        return []
    counts = assigned.groupby("mechanic", sort=False).size()
    return [{"name": name, "value": int(n)} for name, n in counts.items()]


def service_timeline(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    dated = df.dropna(subset=["scheduled_date"])
    if dated.empty:
        return []
    days = dated["scheduled_date"].dt.strftime("%Y-%m-%d")
    counts = dated.groupby(days).size().sort_index()
    return [{"date": day, "count": int(n)} for day, n in counts.items()]


def upcoming_services(df: pd.DataFrame, now: pd.Timestamp) -> List[Dict[str, Any]]:
    upcoming = _upcoming_frame(df, now).head(UPCOMING_LIMIT)
    return [
        {"name": row.service_type, "days": int(row.days)}
        for row in upcoming.itertuples(index=False)
    ]


ChartFn = Callable[[pd.DataFrame, pd.Timestamp], List[Dict[str, Any]]]

CHART_SOURCES: Dict[str, ChartFn] = {
    "service_distribution": service_distribution,
    "service_costs": service_costs,
    "monthly_revenue": monthly_revenue,
    "mechanic_workload": mechanic_workload,
    "service_timeline": service_timeline,
    "upcoming_services": upcoming_services,
}


def build_dashboard_data(
    config: DashboardConfiguration,
    vehicles: List[Dict[str, Any]],
    services: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Compute every metric and chart named by `config`.

    Returns:
      {
        "layout": [...],
        "metrics": {metric_id: value},
        "charts": [{"kind", "data_source", "title", "data"}],
      }
    Unknown metric ids map to None, unknown chart sources to an empty list.
    """
    df = _services_frame(services)
    ts = _as_utc(now)

    metrics: Dict[str, Any] = {}
    for metric_id in config.metrics:
        fn = METRICS.get(metric_id)
        if fn is None:
            logger.warning(f"Unknown dashboard metric '{metric_id}'")
            metrics[metric_id] = None
            continue
        metrics[metric_id] = fn(vehicles, df, ts)

    charts: List[Dict[str, Any]] = []
    for chart in config.charts:
        fn = CHART_SOURCES.get(chart.data_source)
        if fn is None:
            logger.warning(f"Unknown chart data source '{chart.data_source}'")
            data: List[Dict[str, Any]] = []
        else:
            data = fn(df, ts)

        charts.append(
            {
                "kind": chart.kind.value,
                "data_source": chart.data_source,
                "title": chart.title,
                "data": data,
            }
        )

    return {"layout": list(config.layout), "metrics": metrics, "charts": charts}


def build_vehicle_summary(
    services: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Per-vehicle history view: service mix, monthly cost trend, next services.
    """
    df = _services_frame(services)
    ts = _as_utc(now)

    return {
        "service_distribution": service_distribution(df, ts),
        "cost_trend": service_costs(df, ts),
        "upcoming_services": upcoming_services(df, ts),
    }
