#!/usr/bin/env python
"""
Build pipeline - loads the sheet tables and runs the test suite.

Usage:
    python scripts/build_all.py [DATA_DIR]
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from cotizador.config.settings import Settings
from cotizador.data.catalog_loader import load_tables


def main():
    print("=" * 60)
    print("COTIZADOR BUILD PIPELINE")
    print("=" * 60)
    print()

    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    settings = Settings.load(data_dir)

    print(f"[1/2] Loading tables from {settings.data_dir}...")
    snapshot, report = load_tables(settings)

    for name, info in report["input_files"].items():
        print(f"  {name}: {info['path']} ({info['hash']})")
    for warning in report["warnings"]:
        print(f"  ⚠️ {warning}")

    if report["status"] != "success":
        print("\n❌ BUILD FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    metrics = report["metrics"]
    print(f"  Services: {metrics['services']} (extras: {metrics['extras']})")
    print(f"  Zones: {metrics['zones']}")
    print(f"  Postal code ranges: {metrics['postal_codes']}")
    print(f"  Discount rules: {metrics['discount_rules']}")
    print(f"  Dropped rows: {metrics['dropped_services']} services, "
          f"{metrics['dropped_discount_rules']} discount rules")


if __name__ == "__main__":
    main()
