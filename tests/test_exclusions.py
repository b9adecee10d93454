import pytest

from dbsanitycheck.exclusions import (
    MalformedExclusionError,
    is_excluded,
    parse_exclusion,
    row_matches_exclusion,
    split_rows,
)


def test_exclusion_matches_row_with_extra_columns() -> None:
    exclusion = parse_exclusion('{"country": "Brazil"}')

    assert row_matches_exclusion({"country": "Brazil", "id": "5"}, exclusion) is True
    assert row_matches_exclusion({"country": "USA", "id": "5"}, exclusion) is False


def test_match_is_case_sensitive_and_exact() -> None:
    exclusion = parse_exclusion('{"country": "Brazil"}')

    assert row_matches_exclusion({"country": "brazil"}, exclusion) is False
    assert row_matches_exclusion({"country": "Brazil "}, exclusion) is False


def test_missing_column_does_not_match() -> None:
    exclusion = parse_exclusion('{"country": "Brazil", "competitionId": "WC2019"}')

    assert row_matches_exclusion({"country": "Brazil"}, exclusion) is False


def test_numbers_and_null_compare_as_strings() -> None:
    exclusion = parse_exclusion('{"id": 5, "dob": null, "active": true}')

    assert exclusion == {"id": "5", "dob": None, "active": "true"}
    assert row_matches_exclusion({"id": "5", "dob": None, "active": "true"}, exclusion) is True
    assert row_matches_exclusion({"id": "5", "dob": "", "active": "true"}, exclusion) is False


def test_matching_is_pure() -> None:
    row = {"country": "Brazil", "id": "5"}
    exclusion = parse_exclusion('{"country": "Brazil"}')

    first = row_matches_exclusion(row, exclusion)
    second = row_matches_exclusion(row, exclusion)

    assert first == second is True
    assert row == {"country": "Brazil", "id": "5"}


def test_is_excluded_when_any_exclusion_matches() -> None:
    exclusions = [parse_exclusion('{"id": "1"}'), parse_exclusion('{"id": "2"}')]

    assert is_excluded({"id": "2", "name": "Bob"}, exclusions) is True
    assert is_excluded({"id": "3", "name": "Cid"}, exclusions) is False
    assert is_excluded({"id": "3"}, []) is False


def test_split_rows_keeps_order_and_counts_excluded() -> None:
    rows = [{"id": "1"}, {"id": "2"}, {"id": "3"}, {"id": "4"}]

    surviving, excluded = split_rows(rows, [parse_exclusion('{"id": "2"}'), parse_exclusion('{"id": "4"}')])

    assert surviving == [{"id": "1"}, {"id": "3"}]
    assert excluded == 2


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '["country", "Brazil"]',
        '"Brazil"',
        '{"country": ["Brazil"]}',
        '{"country": {"name": "Brazil"}}',
    ],
)
def test_malformed_exclusions_raise(raw: str) -> None:
    with pytest.raises(MalformedExclusionError):
        parse_exclusion(raw)
