"""
Accounts schema bootstrap Lambda handler.

Invoked once after the Aurora cluster is created (custom resource / trigger).
Creates the accounts, roles and account_roles tables if they do not exist.
Failures are logged and re-raised so the deployment sees them.
"""

from typing import Dict, Any

from catalog_shared.config import load_users_config
from catalog_shared.logger import create_logger
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.users import UserAccountService


config = load_users_config()

cloudwatch = create_cloudwatch_client(config)
user_service = UserAccountService(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    request_id = getattr(context, 'aws_request_id', None) or 'schema-init'
    logger = create_logger(
        event or {},
        operation='users-schema-init',
        cloudwatch=cloudwatch,
        namespace=config['metric_namespace'],
        correlation_id=request_id
    )
    logger.log_request_start(path='schema', method='INIT')

    try:
        tables = user_service.ensure_schema()
        logger.log_request_complete(status_code=200, tables=tables)
        return {'tables': tables}
    except Exception as error:
        logger.log_unexpected_error(
            error_type=type(error).__name__,
            error_message=str(error)
        )
        raise
    finally:
        logger.publish_metrics()
