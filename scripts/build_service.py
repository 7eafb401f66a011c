"""
Stage the Lambda asset.

Copies the items_service package into the folder the API stack deploys from.
Runtime dependencies come from the Powertools layer and the Lambda runtime.

Usage:
    python -m scripts.build_service
"""

import os
import shutil

from constants import PROJECT_ROOT
from items_infra.constants import SERVICE_BUILD_FOLDER

PACKAGE_NAME = "items_service"


def main() -> None:
    build_dir = os.path.join(PROJECT_ROOT, SERVICE_BUILD_FOLDER)
    if os.path.isdir(build_dir):
        shutil.rmtree(build_dir)
    os.makedirs(build_dir)

    shutil.copytree(
        os.path.join(PROJECT_ROOT, PACKAGE_NAME),
        os.path.join(build_dir, PACKAGE_NAME),
        ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
    )
    print(f"Staged {PACKAGE_NAME} in {build_dir}")


if __name__ == "__main__":
    main()
