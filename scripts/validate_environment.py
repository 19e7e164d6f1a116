#!/usr/bin/env python3
"""Validate local booking engine environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from booking_backend.domain.catalog import RoomCatalog
from booking_backend.domain.constraints import validate_crm_config
from booking_backend.domain.errors import CollaboratorError
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
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

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("cryptography", "cryptography"),
        ("dotenv", "python-dotenv"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import PackageNotFoundError, version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
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

    settings = get_settings()

    # CHECK 3: CRM connection config
    try:
        validate_crm_config(settings.crm_config())
        ok, line = _print_result("CRM config", True)
    except ValueError as exc:
        ok, line = _print_result("CRM config", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Endpoint decryption
    try:
        endpoint = CrmTransport(settings.crm_config()).verify()
        host = endpoint.split("/")[2] if endpoint.count("/") >= 2 else endpoint
        ok, line = _print_result("CRM endpoint decrypts", True, f": {host}")
    except CollaboratorError as exc:
        ok, line = _print_result("CRM endpoint decrypts", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 5: Room catalog consistency
    try:
        catalog = RoomCatalog()
        unpriced = [
            category.alias
            for category in catalog.categories
            if not catalog.is_priced(category.field_code)
        ]
        ok, line = _print_result(
            "Room catalog",
            True,
            f": {len(catalog.categories)} categories, {len(unpriced)} without pricing",
        )
    except ValueError as exc:
        ok, line = _print_result("Room catalog", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Booking Engine Environment Validation")
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
