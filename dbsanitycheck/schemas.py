from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum


# Column name -> string value, in result column order. SQL NULL stays None.
ResultRow = dict[str, str | None]


class FrozenRow(Mapping[str, str | None]):
    """Read-only, hashable copy of a ResultRow; keeps column order and compares equal to dicts."""

    __slots__ = ("_row",)

    def __init__(self, row: Mapping[str, str | None]) -> None:
        self._row = dict(row)

    def __getitem__(self, column: str) -> str | None:
        return self._row[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._row)

    def __len__(self) -> int:
        return len(self._row)

    def __hash__(self) -> int:
        # Order-insensitive, matching Mapping equality.
        return hash(frozenset(self._row.items()))

    def __repr__(self) -> str:
        return f"FrozenRow({self._row!r})"


class CheckStatus(str, Enum):
    CLEAN = "clean"
    ALL_EXCLUDED = "all_excluded"
    ANOMALY = "anomaly"
    FAILED = "failed"


@dataclass(frozen=True)
class Exclusion:
    id: int | None
    raw: str


@dataclass(frozen=True)
class Check:
    id: int | None
    category: str
    topic: str
    query: str
    exclusions: tuple[Exclusion, ...] = ()
    comments: str | None = None


@dataclass(frozen=True)
class Finding:
    category: str
    topic: str
    rows: tuple[FrozenRow, ...]

    def __post_init__(self) -> None:
        # Copy rows so later changes to the executor's dicts cannot reach the finding.
        object.__setattr__(self, "rows", tuple(FrozenRow(row) for row in self.rows))


@dataclass(frozen=True)
class ExecutionError:
    check: Check
    message: str


@dataclass(frozen=True)
class ExclusionError:
    check: Check
    exclusion_id: int | None
    message: str


@dataclass(frozen=True)
class KnownFalsePositive:
    category: str
    topic: str
    excluded_rows: int


@dataclass(frozen=True)
class CheckResult:
    check: Check
    status: CheckStatus
    finding: Finding | None = None
    error: ExecutionError | None = None
    false_positive: KnownFalsePositive | None = None
    exclusion_errors: tuple[ExclusionError, ...] = ()


@dataclass(frozen=True)
class Report:
    findings: tuple[Finding, ...] = ()
    errors: tuple[ExecutionError, ...] = ()
    false_positives: tuple[KnownFalsePositive, ...] = ()
    exclusion_errors: tuple[ExclusionError, ...] = ()
    checks_run: int = 0

    @property
    def has_anomalies(self) -> bool:
        return bool(self.findings)

    @property
    def finding_count(self) -> int:
        return len(self.findings)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def anomalous_row_count(self) -> int:
        return sum(len(finding.rows) for finding in self.findings)
