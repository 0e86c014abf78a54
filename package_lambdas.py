#!/usr/bin/env python3
"""
Package Lambda functions with shared dependencies.
This script copies catalog_shared into each Lambda function directory.
Note: External dependencies (python-ulid) are provided via Lambda Layer;
boto3 ships with the Lambda runtime.
"""
import shutil
import os

# Lambda function directories
lambda_functions = [
    'lambda/albums_create',
    'lambda/albums_delete',
    'lambda/artists_delete',
    'lambda/albums_list',
    'lambda/albums_queue',
    'lambda/catalog_api',
    'lambda/users_register_create',
    'lambda/users_schema_init',
]

shared_dir = 'lambda/catalog_shared'

print("Packaging Lambda functions with shared dependencies...\n")

for func_dir in lambda_functions:
    target_shared = os.path.join(func_dir, 'catalog_shared')

    # Remove existing catalog_shared if it exists
    if os.path.exists(target_shared):
        shutil.rmtree(target_shared)
        print(f"✓ Removed old catalog_shared from {func_dir}")

    shutil.copytree(shared_dir, target_shared, ignore=shutil.ignore_patterns('__pycache__', '*.pyc', 'test_*.py', '.pytest_cache'))
    print(f"✓ Copied catalog_shared to {func_dir}")

print("\n✅ All Lambda functions packaged successfully!")
print("\nNote: python-ulid is provided via Lambda Layer (see create_lambda_layer.py)")
