# core/dashboard_rules.py

from dataclasses import dataclass
from typing import Sequence, Tuple

from garagedesk.core.domain import ChartKind, ChartSpec, DashboardConfiguration


@dataclass(frozen=True)
class KeywordRule:
    """
    One (predicate, delta) pair: when `keyword` appears in the suggestion text,
    the configuration gains `metric` and `chart`.
    """

    keyword: str
    metric: str
    chart: ChartSpec

    def matches(self, text: str) -> bool:
        # case-sensitive: "Cost" does not trigger
        return self.keyword in text

    def apply(self, config: DashboardConfiguration) -> None:
        config.add_metric(self.metric)
        config.add_chart(self.chart.model_copy())


# Applied in this order: cost -> mechanic -> schedule
DEFAULT_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(
        keyword="cost",
        metric="total_revenue",
        chart=ChartSpec(kind=ChartKind.BAR, data_source="monthly_revenue", title="Monthly Revenue"),
    ),
    KeywordRule(
        keyword="mechanic",
        metric="active_mechanics",
        chart=ChartSpec(kind=ChartKind.PIE, data_source="mechanic_workload", title="Mechanic Workload"),
    ),
    KeywordRule(
        keyword="schedule",
        metric="completion_rate",
        chart=ChartSpec(kind=ChartKind.AREA, data_source="service_timeline", title="Service Timeline"),
    ),
)


def base_default_configuration() -> DashboardConfiguration:
    """Starting point on the success path, before any rule fires."""
    return DashboardConfiguration(
        layout=["metrics", "charts", "tables"],
        metrics=["total_vehicles", "active_services", "upcoming_services"],
        charts=[
            ChartSpec(
                kind=ChartKind.PIE,
                data_source="service_distribution",
                title="Service Types Distribution",
            ),
            ChartSpec(
                kind=ChartKind.LINE,
                data_source="service_costs",
                title="Service Costs Trend",
            ),
        ],
    )


def minimal_default_configuration() -> DashboardConfiguration:
    """
    Fallback returned whenever request processing fails.

    Intentionally smaller than the base default (no cost trend chart, no tables).
    """
    return DashboardConfiguration(
        layout=["metrics", "charts"],
        metrics=["total_vehicles", "active_services"],
        charts=[
            ChartSpec(
                kind=ChartKind.PIE,
                data_source="service_distribution",
                title="Service Distribution",
            ),
        ],
    )


def apply_rules(
    text: str,
    rules: Sequence[KeywordRule] = DEFAULT_RULES,
) -> DashboardConfiguration:
    """
    Base default configuration plus the delta of every rule matching `text`.
    Rules only ever add entries.
    """
    config = base_default_configuration()
    for rule in rules:
        if rule.matches(text):
            rule.apply(config)
    return config
