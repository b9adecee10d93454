import argparse
import json
import logging
from pathlib import Path

from dbsanitycheck.check_store import CatalogLoadError
from dbsanitycheck.config import get_settings
from dbsanitycheck.database import build_session_factory
from dbsanitycheck.notifier import LogNotifier, NotificationError, build_notifier
from dbsanitycheck.report import report_to_dict
from dbsanitycheck.service import SanityCheckService


logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Audit the database with the sanity check catalog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="run every sanity check once and send the report")
    run_parser.add_argument("--dry-run", action="store_true", help="log the report instead of sending it")
    run_parser.add_argument("--output", required=False, help="also write the report as JSON to this path")

    return parser.parse_args()


def write_report(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2)
        outfile.write("\n")


def main() -> None:
    args = parse_args()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    session_factory = build_session_factory(settings.database_url)
    notifier = LogNotifier() if args.dry_run else build_notifier(settings)
    service = SanityCheckService(session_factory, notifier)

    try:
        report = service.execute()
    except (CatalogLoadError, NotificationError):
        logger.exception("sanity check run failed")
        print("status=failed")
        raise SystemExit(1)

    if args.output:
        write_report(Path(args.output), report_to_dict(report))

    print(
        "status={status} checks={checks} findings={findings} rows={rows} errors={errors} false_positives={fps}".format(
            status="anomalies" if report.has_anomalies else "clean",
            checks=report.checks_run,
            findings=report.finding_count,
            rows=report.anomalous_row_count,
            errors=report.error_count,
            fps=len(report.false_positives),
        )
    )


if __name__ == "__main__":
    main()
