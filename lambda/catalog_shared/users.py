"""
User registration service.

This module implements user registration against the Aurora PostgreSQL
accounts database through the RDS Data API, including:
- User creation with ULID generation
- Salted PBKDF2-SHA256 password hashing (plaintext is never stored)
- Username/email uniqueness enforced by the database
- Schema bootstrap for the accounts, roles and account_roles tables
"""

import base64
import hashlib
import hmac
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError
from ulid import ULID

from catalog_shared.errors import ConflictError, StoreUnavailableError
from catalog_shared.types import RegistrationRequest, UserAccount


PASSWORD_HASH_ALGORITHM = 'pbkdf2_sha256'
PASSWORD_HASH_ITERATIONS = 600000
PASSWORD_SALT_BYTES = 16

SCHEMA_STATEMENTS = [
    'CREATE TABLE IF NOT EXISTS accounts ('
    'user_id VARCHAR(50) PRIMARY KEY,'
    'username VARCHAR(50) UNIQUE NOT NULL,'
    'password VARCHAR(255) NOT NULL,'
    'email VARCHAR(255) UNIQUE NOT NULL,'
    'created_at TIMESTAMP(3) NOT NULL,'
    'last_login TIMESTAMP(3))',

    'CREATE TABLE IF NOT EXISTS roles ('
    'role_id VARCHAR(50) PRIMARY KEY,'
    'role_name VARCHAR(255))',

    'CREATE TABLE IF NOT EXISTS account_roles ('
    'user_id VARCHAR(50),'
    'role_id VARCHAR(50),'
    'PRIMARY KEY(user_id, role_id),'
    'FOREIGN KEY(role_id) REFERENCES roles (role_id),'
    'FOREIGN KEY(user_id) REFERENCES accounts (user_id))',
]

INSERT_ACCOUNT_SQL = (
    'INSERT INTO accounts (user_id, username, password, email, created_at) '
    'VALUES (:id, :user, :pw, :email, TO_TIMESTAMP(:dt))'
)

# Data API error codes that describe a transient condition
RETRYABLE_ERROR_CODES = {
    'ServiceUnavailableError',
    'StatementTimeoutException',
    'DatabaseUnavailableException',
    'DatabaseResumingException',
    'ThrottlingException',
}

_UNIQUE_VIOLATION = re.compile(r'duplicate key|unique constraint', re.IGNORECASE)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def hash_password(
    password: str,
    salt: Optional[bytes] = None,
    iterations: int = PASSWORD_HASH_ITERATIONS
) -> str:
    """
    Hash a password with PBKDF2-SHA256 and a per-user random salt.

    Returns:
        'pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>'
    """
    if salt is None:
        salt = os.urandom(PASSWORD_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, iterations)
    return f'{PASSWORD_HASH_ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}'


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a value produced by hash_password."""
    try:
        algorithm, iterations, salt, expected = encoded.split('$')
        if algorithm != PASSWORD_HASH_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            base64.b64decode(salt),
            int(iterations)
        )
    except ValueError:
        return False
    return hmac.compare_digest(_b64(digest), expected)


def _conflicting_field(message: str) -> str:
    lowered = message.lower()
    if 'email' in lowered:
        return 'email'
    if 'username' in lowered:
        return 'username'
    return 'user'


class UserAccountService:
    """
    Service class for user account operations.

    The RDS Data API client is built once per process and injected.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        rds_data: Any = None,
        password_iterations: int = PASSWORD_HASH_ITERATIONS
    ):
        """
        Args:
            config: Dictionary containing:
                - resource_arn: ARN of the Aurora cluster
                - secret_arn: ARN of the database credentials secret
                - database_name: Database holding the accounts table
            rds_data: boto3 'rds-data' client (built when omitted)
            password_iterations: PBKDF2 iteration count
        """
        self.config = config
        self.rds_data = rds_data or boto3.client('rds-data')
        self.password_iterations = password_iterations

    def _execute(self, sql: str, parameters: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'resourceArn': self.config['resource_arn'],
            'secretArn': self.config['secret_arn'],
            'database': self.config['database_name'],
            'sql': sql,
        }
        if parameters:
            params['parameters'] = parameters
        return self.rds_data.execute_statement(**params)

    def register_user(self, request: RegistrationRequest) -> UserAccount:
        """
        Register a new user.

        Args:
            request: Validated registration request (username, password, email)

        Returns:
            Created account, without the password

        Raises:
            ConflictError: If the username or email is already registered
            StoreUnavailableError: If the database is unavailable
        """
        user_id = str(ULID())
        now = datetime.now(timezone.utc)

        parameters = [
            {'name': 'id', 'value': {'stringValue': user_id}},
            {'name': 'user', 'value': {'stringValue': request['username']}},
            {'name': 'pw', 'value': {'stringValue': hash_password(
                request['password'], iterations=self.password_iterations)}},
            {'name': 'email', 'value': {'stringValue': request['email']}},
            {'name': 'dt', 'value': {'doubleValue': now.timestamp()}},
        ]

        try:
            self._execute(INSERT_ACCOUNT_SQL, parameters)
        except ClientError as error:
            code = error.response.get('Error', {}).get('Code', 'Unknown')
            message = error.response.get('Error', {}).get('Message', '')
            if _UNIQUE_VIOLATION.search(message):
                field = _conflicting_field(message)
                raise ConflictError(
                    f'A user with this {field} is already registered',
                    {'field': field}
                ) from error
            if code in RETRYABLE_ERROR_CODES:
                raise StoreUnavailableError(
                    'Accounts database unavailable',
                    {'awsErrorCode': code}
                ) from error
            raise

        return {
            'userId': user_id,
            'username': request['username'],
            'email': request['email'],
            'createdAt': now.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
        }

    def ensure_schema(self) -> List[str]:
        """
        Create the accounts, roles and account_roles tables if missing.

        Returns:
            Names of the tables ensured, in creation order
        """
        for sql in SCHEMA_STATEMENTS:
            self._execute(sql)
        return ['accounts', 'roles', 'account_roles']
