"""Reshape a dataset into a short list of labelled points for a chart.

The strategy depends on the request: pie charts sum the value column per
group, bar/line charts without a group column bin the value column into a
histogram, and bar/line charts with a group column average per group.

Nothing here raises on bad selections. A value column that is unset, missing
or not numeric, or a group column that does not exist, yields an empty series
and the caller shows placeholder content instead. Cells that do not parse
as numbers are left out of sums, means and bins rather than counted as 0,
so callers should show column null counts next to the chart.
"""

import logging
from typing import Any, List

import numpy as np
import pandas as pd

from profiler import is_null, parse_number
from schemas import ChartPoint, ChartRequest, Dataset

logger = logging.getLogger(__name__)

PIE_COLORS = [
    "#2563EB",
    "#7C3AED",
    "#059669",
    "#DC2626",
    "#D97706",
    "#0891B2",
    "#DB2777",
    "#65A30D",
]
UNKNOWN_LABEL = "Unknown"
DEFAULT_BINS = 10
DEFAULT_MAX_GROUPS = 20


def group_label(value: Any) -> str:
    if is_null(value):
        return UNKNOWN_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _numbers(values: List[Any]) -> List[float]:
    return [np.nan if n is None else n for n in (parse_number(v) for v in values)]


def _grouped(dataset: Dataset, request: ChartRequest):
    if dataset.column_index(request.group_column) is None:
        logger.info("Group column %r not in dataset %r", request.group_column, dataset.name)
        return None
    frame = pd.DataFrame(
        {
            "group": [group_label(v) for v in dataset.values(request.group_column)],
            "value": pd.Series(_numbers(dataset.values(request.value_column)), dtype="float64"),
        }
    )
    # sort=False keeps groups in first-seen order
    return frame.groupby("group", sort=False)["value"]


def pie_series(dataset: Dataset, request: ChartRequest) -> List[ChartPoint]:
    grouped = _grouped(dataset, request)
    if grouped is None:
        return []
    totals = grouped.sum(min_count=0)
    return [
        ChartPoint(label=str(label), value=float(total), color=PIE_COLORS[i % len(PIE_COLORS)])
        for i, (label, total) in enumerate(totals.items())
    ]


def grouped_average_series(
    dataset: Dataset, request: ChartRequest, max_groups: int = DEFAULT_MAX_GROUPS
) -> List[ChartPoint]:
    """Mean of the value column per group, first ``max_groups`` groups in encounter order.

    The limit keeps the chart readable; it is not a top-N by value. Groups
    without a single numeric cell have no mean and are skipped.
    """
    grouped = _grouped(dataset, request)
    if grouped is None:
        return []
    means = grouped.mean().dropna().head(max_groups)
    return [ChartPoint(label=str(label), value=float(mean)) for label, mean in means.items()]


def histogram_series(dataset: Dataset, request: ChartRequest, bins: int = DEFAULT_BINS) -> List[ChartPoint]:
    values = pd.Series(_numbers(dataset.values(request.value_column)), dtype="float64").dropna()
    if values.empty:
        return []

    low, high = float(values.min()), float(values.max())
    single_bin = [ChartPoint(label=f"{low:.1f}-{high:.1f}", value=float(values.size))]
    if low == high:
        # a single distinct value gets one bin holding every row
        return single_bin

    # equal-width bins, half-open except the last, which includes the maximum
    try:
        counts, edges = np.histogram(values.to_numpy(), bins=bins, range=(low, high))
    except ValueError:
        # span too narrow for distinct edges, or too wide to be finite
        logger.info("Cannot build %d bins over [%r, %r]; using one bin", bins, low, high)
        return single_bin
    return [
        ChartPoint(label=f"{edges[i]:.1f}-{edges[i + 1]:.1f}", value=float(count))
        for i, count in enumerate(counts)
    ]


def aggregate(
    dataset: Dataset,
    request: ChartRequest,
    bins: int = DEFAULT_BINS,
    max_groups: int = DEFAULT_MAX_GROUPS,
) -> List[ChartPoint]:
    if not request.value_column:
        return []
    value_col = dataset.column(request.value_column)
    if value_col is None or value_col.inferred_type != "number":
        logger.info(
            "Value column %r is not numeric in dataset %r; returning empty series",
            request.value_column, dataset.name,
        )
        return []
    if dataset.row_count == 0:
        return []

    if request.kind == "pie":
        if not request.group_column:
            return []
        return pie_series(dataset, request)
    if request.group_column:
        return grouped_average_series(dataset, request, max_groups=max_groups)
    return histogram_series(dataset, request, bins=bins)


render_series = aggregate
