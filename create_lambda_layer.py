#!/usr/bin/env python3
"""
Create the Lambda Layer holding the third-party runtime dependencies.
boto3 is already available in the Lambda runtime, so the layer only needs
python-ulid (used for user ids) and its typing-extensions dependency.
"""
import subprocess
import shutil
import sys
from pathlib import Path

LAYER_DIR = Path('lambda_layer/python')

LAYER_REQUIREMENTS = [
    'python-ulid>=2.2.0',
    'typing-extensions>=4.0.0',
]

# Build leftovers that only bloat the layer
PATTERNS_TO_REMOVE = ['__pycache__', '*.pyc', 'bin']


def install_requirements(layer_dir: Path) -> None:
    print(f"Installing {', '.join(LAYER_REQUIREMENTS)}...")
    result = subprocess.run(
        [
            sys.executable, '-m', 'pip', 'install',
            *LAYER_REQUIREMENTS,
            '-t', str(layer_dir),
            '--upgrade',
            '--no-cache-dir'
        ],
        capture_output=True,
        text=True
    )

    if result.returncode != 0:
        print("✗ Failed to install layer dependencies")
        print(f"Error: {result.stderr}")
        sys.exit(1)

    print("✓ Installed layer dependencies")


def clean_layer(layer_dir: Path) -> None:
    """Remove caches and scripts but keep dist-info for dependency tracking."""
    for pattern in PATTERNS_TO_REMOVE:
        for item in layer_dir.rglob(pattern):
            if item.is_dir():
                shutil.rmtree(item)
            elif item.exists():
                item.unlink()
            print(f"  ✓ Removed {item.relative_to(layer_dir)}")


def main() -> None:
    LAYER_DIR.mkdir(parents=True, exist_ok=True)
    print(f"Creating Lambda Layer in {LAYER_DIR}\n")

    install_requirements(LAYER_DIR)

    print("\nInstalled packages:")
    for item in sorted(LAYER_DIR.iterdir()):
        if item.is_dir() and not item.name.startswith('__'):
            print(f"  - {item.name}")

    print("\nCleaning up unnecessary files...")
    clean_layer(LAYER_DIR)

    print("\n✅ Lambda Layer created successfully!")
    print("Attach it to the users_register_create and users_schema_init functions")


if __name__ == '__main__':
    main()
