import random
from collections import Counter

from tablecopy.diffing import diff_columns
from tablecopy.models import ColumnDescriptor


def _col(name: str, data_type: str = "int", max_length=None, **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(name, data_type, max_length=max_length, **kwargs)


def test_identical_columns_have_no_errors(orders_columns) -> None:
    assert diff_columns(orders_columns, orders_columns) == []


def test_missing_column_in_destination() -> None:
    errors = diff_columns([_col("id"), _col("name", "varchar", 10)], [_col("id")])
    assert errors == ["name: Column not found in destination database"]


def test_data_type_mismatch_message() -> None:
    errors = diff_columns([_col("name", "varchar", 10)], [_col("name", "nvarchar", 20)])
    assert errors == ["name: Data type mismatch nvarchar 20 != varchar 10"]


def test_null_length_differs_from_number() -> None:
    errors = diff_columns([_col("code", "varchar", None)], [_col("code", "varchar", 5)])
    assert errors == ["code: Data type mismatch varchar 5 != varchar null"]


def test_precision_and_scale_are_ignored() -> None:
    src = [_col("amount", "decimal", numeric_precision=10, numeric_scale=2)]
    dest = [_col("amount", "decimal", numeric_precision=18, numeric_scale=4)]
    assert diff_columns(src, dest) == []


def test_extra_destination_column() -> None:
    errors = diff_columns([_col("id")], [_col("id"), _col("legacy_flag", "bit")])
    assert errors == ["Extra column found in destination database: legacy_flag"]


def test_source_errors_come_before_extra_columns() -> None:
    src = [_col("a"), _col("b"), _col("c")]
    dest = [_col("x"), _col("c", "bigint"), _col("y")]
    assert diff_columns(src, dest) == [
        "a: Column not found in destination database",
        "b: Column not found in destination database",
        "c: Data type mismatch bigint null != int null",
        "Extra column found in destination database: x",
        "Extra column found in destination database: y",
    ]


def test_order_independent() -> None:
    src = [_col("a"), _col("b", "varchar", 5), _col("c"), _col("d")]
    dest = [_col("d"), _col("b", "varchar", 9), _col("e"), _col("a")]
    expected = Counter(diff_columns(src, dest))

    rng = random.Random(7)
    for _ in range(10):
        s, d = list(src), list(dest)
        rng.shuffle(s)
        rng.shuffle(d)
        assert Counter(diff_columns(s, d)) == expected
    assert diff_columns(dest, dest[::-1]) == []
