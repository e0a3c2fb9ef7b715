#!/usr/bin/env python3
"""Validate local SpaceBook environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import datetime, timedelta
from importlib.metadata import version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from spacebook.domain.errors import BookingConflictError
from spacebook.domain.models import Identity, Role
from spacebook.repository.data_repository import DataRepository
from spacebook.services.booking_service import ReservationService
from spacebook.services.token_service import TokenCodec
from spacebook.utils.config import get_settings
from spacebook.utils.timeutils import UTC

SEPARATOR_LINE = "=" * 44
VALIDATION_SECRET = "environment-validation-secret-0123456789"


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="spacebook-env-")

    # CHECK 1 — Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("jwt", "PyJWT"),
        ("pandas", "pandas"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        base_settings = get_settings()
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "spacebook_validation.db",
            jwt_secret=base_settings.jwt_secret or VALIDATION_SECRET,
            password_hash_iterations=1000,
        )
        repository = DataRepository(validation_settings)

        # CHECK 3 — Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 — Token issue/verify round trip
        codec = TokenCodec(settings=validation_settings)
        try:
            identity = Identity(subject_id="validation", email="check@example.com", role=Role.EMPLOYEE)
            claims = codec.verify(codec.issue(identity))
            if claims.subject_id != identity.subject_id or claims.role is not Role.EMPLOYEE:
                raise RuntimeError("verified claims do not match issued identity")
            ok, line = _print_result("Token round trip", True)
        except Exception as exc:
            ok, line = _print_result("Token round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5 — Reservation create and conflict detection
        try:
            comp_id, emp_id = repository.create_company_with_manager(
                company_name="Validation Co",
                about=None,
                manager_name="Validator",
                manager_position="QA",
                manager_email="validator@example.com",
            )
            space_id = repository.create_space("Validation Room", 4, None)
            fixed_now = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
            service = ReservationService(
                repository=repository,
                settings=replace(validation_settings, booking_timezone="UTC"),
                clock=lambda: fixed_now,
            )
            manager = Identity(subject_id=emp_id, email="validator@example.com", role=Role.MANAGER)
            fixed_codec = TokenCodec(settings=validation_settings, clock=lambda: fixed_now)
            manager_claims = fixed_codec.verify(fixed_codec.issue(manager))
            start = fixed_now + timedelta(hours=1)
            end = start + timedelta(minutes=30)
            service.create_reservation(manager_claims, space_id, start, end)
            try:
                service.create_reservation(manager_claims, space_id, start, end)
            except BookingConflictError:
                pass
            else:
                raise RuntimeError("overlapping reservation was accepted")
            ok, line = _print_result("Reservation engine", True, f": company {comp_id}")
        except Exception as exc:
            ok, line = _print_result("Reservation engine", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" SpaceBook Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
