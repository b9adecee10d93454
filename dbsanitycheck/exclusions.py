import json
from collections.abc import Mapping, Sequence

from dbsanitycheck.schemas import ResultRow


ParsedExclusion = dict[str, str | None]


class MalformedExclusionError(ValueError):
    pass


def _expected_value(key: str, value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        raise MalformedExclusionError(f"exclusion value for '{key}' must be a scalar")
    # Numbers and booleans compare through their JSON text, e.g. 5 -> "5", true -> "true".
    return json.dumps(value)


def parse_exclusion(raw: str) -> ParsedExclusion:
    """Deserialize a stored exclusion (one flat JSON object) into column -> expected value."""
    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedExclusionError(f"exclusion is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedExclusionError("exclusion must be a JSON object")

    return {key: _expected_value(key, value) for key, value in payload.items()}


def row_matches_exclusion(row: Mapping[str, str | None], exclusion: Mapping[str, str | None]) -> bool:
    # Columns the exclusion does not name are wildcards.
    for column, expected in exclusion.items():
        if column not in row or row[column] != expected:
            return False
    return True


def is_excluded(row: ResultRow, exclusions: Sequence[Mapping[str, str | None]]) -> bool:
    return any(row_matches_exclusion(row, exclusion) for exclusion in exclusions)


def split_rows(
    rows: Sequence[ResultRow], exclusions: Sequence[Mapping[str, str | None]]
) -> tuple[list[ResultRow], int]:
    """Return the rows matching no exclusion, in order, and how many rows were excluded."""
    surviving = [row for row in rows if not is_excluded(row, exclusions)]
    return surviving, len(rows) - len(surviving)
