"""
Run provider acquisition from CLI.
"""

from __future__ import annotations

import argparse
import json
import sys
import uuid

from app.acquisition.errors import NotFoundError
from app.acquisition.logging_utils import configure_logging
from app.schemas.acquisition import (
    BatchRunResponse,
    ExecutionResultResponse,
    ProviderFileImportResponse,
)
from app.services.acquisition_service import AcquisitionService
from db.session import SessionLocal


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run provider acquisition.")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--category",
        dest="category",
        default=None,
        help="Run one provider category (e.g. electricity, mobile, strøm).",
    )
    target.add_argument(
        "--all",
        dest="run_all",
        action="store_true",
        help="Run every provider category sequentially.",
    )
    target.add_argument(
        "--endpoint",
        dest="endpoint_id",
        type=uuid.UUID,
        default=None,
        help="Run a single endpoint by id.",
    )
    target.add_argument(
        "--import-file",
        dest="import_file",
        default=None,
        metavar="PATH",
        help="Register scraping endpoints from a category|name|url provider file.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging()

    service = AcquisitionService()
    exit_code = 0
    with SessionLocal() as db:
        try:
            if args.import_file:
                summary = service.import_provider_file(db=db, path=args.import_file)
                payload = ProviderFileImportResponse.from_summary(summary).model_dump(mode="json")
            elif args.run_all:
                batch = service.run_all_categories(db=db)
                payload = BatchRunResponse.from_batch(batch).model_dump(mode="json")
                if batch.summary.failed_categories:
                    exit_code = 1
            elif args.endpoint_id is not None:
                result = service.run_endpoint(db=db, endpoint_id=args.endpoint_id)
                payload = ExecutionResultResponse.from_result(result).model_dump(mode="json")
                exit_code = 0 if result.success else 1
            else:
                result = service.run_category(db=db, category=args.category)
                payload = ExecutionResultResponse.from_result(result).model_dump(mode="json")
                exit_code = 0 if result.success else 1
        except (NotFoundError, FileNotFoundError) as exc:
            print(str(exc), file=sys.stderr)
            return 1

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
