import pytest

from charts import PIE_COLORS, UNKNOWN_LABEL, aggregate, group_label, histogram_series
from ingest import ingest
from schemas import ChartRequest

CATEGORY_ROWS = [["A", 10], ["A", 20], ["B", 5]]
TYPES = {"v": "number"}


@pytest.fixture
def categories(make_dataset):
    return make_dataset(["cat", "v"], CATEGORY_ROWS, TYPES)


def _as_dict(points):
    return {p.label: p.value for p in points}


def test_pie_sums_per_group(categories):
    points = aggregate(categories, ChartRequest(kind="pie", value_column="v", group_column="cat"))
    assert _as_dict(points) == {"A": 30, "B": 5}
    assert [p.color for p in points] == PIE_COLORS[:2]


@pytest.mark.parametrize("kind", ["bar", "line"])
def test_grouped_average(categories, kind):
    points = aggregate(categories, ChartRequest(kind=kind, value_column="v", group_column="cat"))
    assert [(p.label, p.value) for p in points] == [("A", 15), ("B", 5)]
    assert all(p.color is None for p in points)


def test_pie_colors_wrap_after_palette(make_dataset):
    rows = [[f"g{i}", 1] for i in range(10)]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    points = aggregate(dataset, ChartRequest(kind="pie", value_column="v", group_column="cat"))
    assert len(points) == 10
    assert points[8].color == PIE_COLORS[0]
    assert points[9].color == PIE_COLORS[1]


def test_groups_keep_first_seen_order(make_dataset):
    rows = [["z", 1], ["a", 2], ["z", 3], ["m", 4]]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    points = aggregate(dataset, ChartRequest(kind="pie", value_column="v", group_column="cat"))
    assert [p.label for p in points] == ["z", "a", "m"]


def test_missing_group_values_are_unknown(make_dataset):
    rows = [["", 1], [None, 2], ["  ", 3], ["A", 4]]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    points = aggregate(dataset, ChartRequest(kind="pie", value_column="v", group_column="cat"))
    assert _as_dict(points) == {UNKNOWN_LABEL: 6, "A": 4}


def test_grouped_average_truncates_in_encounter_order(make_dataset):
    rows = [[f"g{i}", i] for i in range(25)]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    points = aggregate(dataset, ChartRequest(kind="bar", value_column="v", group_column="cat"))
    assert len(points) == 20
    assert points[0].label == "g0"
    assert points[-1].label == "g19"


def test_group_limit_is_configurable(make_dataset):
    rows = [[f"g{i}", i] for i in range(5)]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    request = ChartRequest(kind="bar", value_column="v", group_column="cat")
    assert len(aggregate(dataset, request, max_groups=3)) == 3


def test_unparseable_cells_are_excluded_not_zeroed(make_dataset):
    rows = [["A", "10"], ["A", "oops"], ["A", "20"], ["B", ""], ["B", "5"]]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    avg = aggregate(dataset, ChartRequest(kind="bar", value_column="v", group_column="cat"))
    assert _as_dict(avg) == {"A": 15, "B": 5}
    pie = aggregate(dataset, ChartRequest(kind="pie", value_column="v", group_column="cat"))
    assert _as_dict(pie) == {"A": 30, "B": 5}


def test_group_without_numbers_is_skipped_in_average(make_dataset):
    rows = [["A", 1], ["B", "n/a"], ["C", 3]]
    dataset = make_dataset(["cat", "v"], rows, TYPES)
    points = aggregate(dataset, ChartRequest(kind="line", value_column="v", group_column="cat"))
    assert [p.label for p in points] == ["A", "C"]


def test_histogram_counts_every_value_including_max(make_dataset):
    dataset = make_dataset(["v"], [[i] for i in range(1, 11)], TYPES)
    points = aggregate(dataset, ChartRequest(kind="bar", value_column="v"))
    assert len(points) == 10
    assert sum(p.value for p in points) == 10
    assert points[0].label == "1.0-1.9"
    assert points[-1].label == "9.1-10.0"
    assert points[-1].value >= 1


def test_histogram_ignores_non_numeric_cells(make_dataset):
    dataset = make_dataset(["v"], [["1"], ["x"], [""], ["3"], [None]], TYPES)
    points = histogram_series(dataset, ChartRequest(value_column="v"))
    assert sum(p.value for p in points) == 2


def test_histogram_single_value_gets_one_full_bin(make_dataset):
    dataset = make_dataset(["v"], [[5], [5], [5]], TYPES)
    points = aggregate(dataset, ChartRequest(kind="line", value_column="v"))
    assert [(p.label, p.value) for p in points] == [("5.0-5.0", 3)]


def test_histogram_bin_count_is_configurable(make_dataset):
    dataset = make_dataset(["v"], [[i] for i in range(100)], TYPES)
    points = aggregate(dataset, ChartRequest(kind="bar", value_column="v"), bins=4)
    assert [p.value for p in points] == [25, 25, 25, 25]


def test_text_value_column_returns_empty_series(categories):
    assert aggregate(categories, ChartRequest(kind="bar", value_column="cat")) == []
    assert aggregate(categories, ChartRequest(kind="pie", value_column="cat", group_column="cat")) == []


def test_unknown_columns_return_empty_series(categories):
    assert aggregate(categories, ChartRequest(kind="bar", value_column="missing")) == []
    assert aggregate(categories, ChartRequest(kind="bar", value_column="v", group_column="missing")) == []


def test_pie_without_group_column_returns_empty_series(categories):
    assert aggregate(categories, ChartRequest(kind="pie", value_column="v")) == []


def test_date_group_column_from_csv(sales_csv):
    dataset = ingest("sales.csv", None, sales_csv)
    points = aggregate(dataset, ChartRequest(kind="line", value_column="amount", group_column="date"))
    assert [p.label for p in points] == ["2024-01-05", "2024-01-06", "2024-01-07"]


@pytest.mark.parametrize(
    "value,expected",
    [(None, UNKNOWN_LABEL), ("", UNKNOWN_LABEL), (" x ", "x"), (3.0, "3"), (2.5, "2.5"), (True, "true")],
)
def test_group_label(value, expected):
    assert group_label(value) == expected


@pytest.mark.parametrize("values", [[1, 1.0000000000000002], [-1e308, 0, 1e308]])
def test_histogram_falls_back_to_one_bin_when_edges_cannot_be_built(make_dataset, values):
    dataset = make_dataset(["v"], [[v] for v in values], TYPES)
    points = aggregate(dataset, ChartRequest(kind="bar", value_column="v"))
    assert sum(p.value for p in points) == len(values)


def test_histogram_close_values_from_csv():
    dataset = ingest("t.csv", None, "v\n1\n1.0000000000000002\n")
    points = aggregate(dataset, ChartRequest(kind="bar", value_column="v"))
    assert [(p.label, p.value) for p in points] == [("1.0-1.0", 2)]


@pytest.mark.parametrize("kind", ["bar", "line", "pie"])
def test_missing_value_column_returns_empty_series(categories, kind):
    assert aggregate(categories, ChartRequest(kind=kind)) == []
    assert aggregate(categories, ChartRequest(kind=kind, group_column="cat")) == []
