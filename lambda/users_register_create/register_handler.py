"""
User registration Lambda handler.

This handler implements the API entry point for POST /user.
It follows the Lambda-per-operation pattern with clear separation of concerns:
- Handler: Parse request, validate input, map errors to HTTP responses
- Service: Business logic (catalog_shared.users)
- Validation: Input validation (catalog_shared.validation)

Configuration is read once at startup and validated on boot.
"""

from typing import Dict, Any

from catalog_shared.config import load_users_config
from catalog_shared.errors import DomainError, ValidationError
from catalog_shared.logger import create_logger
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.responses import create_error_response, create_success_response, status_code_for
from catalog_shared.transcoder import parse_json_body
from catalog_shared.users import UserAccountService
from catalog_shared.validation import validate_registration_request


# Load configuration at module initialization (cold start)
# This will fail fast if configuration is invalid
config = load_users_config()

# Initialize clients and service once at cold start
cloudwatch = create_cloudwatch_client(config)
user_service = UserAccountService(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for user registration.

    Request flow:
    1. Create structured logger with correlation ID
    2. Log request start
    3. Parse and validate request body
    4. Delegate to service layer
    5. Map domain errors to appropriate HTTP responses
    6. Log request completion with latency

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context object

    Returns:
        API Gateway Lambda proxy integration response

    Response codes:
        201: User created
        400: Validation error (missing fields, invalid email, short password)
        409: Conflict (username or email already registered)
        500: Internal error
    """
    logger = create_logger(
        event,
        operation='users-register-create',
        cloudwatch=cloudwatch,
        namespace=config['metric_namespace']
    )

    logger.log_request_start(
        path=event.get('path', '/user'),
        method=event.get('httpMethod', 'POST')
    )

    try:
        request = parse_json_body(event.get('body'))

        # Fail fast - validate before touching the database
        validation_errors = validate_registration_request(request)
        if validation_errors:
            raise ValidationError('Invalid request data', {'errors': validation_errors})

        user = user_service.register_user(request)

        logger.log_request_complete(
            status_code=201,
            userId=user['userId'],
            username=user['username']
        )

        return create_success_response(201, user)

    except ValidationError as error:
        logger.log_validation_error(errors=error.details)
        return create_error_response(400, error.code, error.message, error.details)

    except DomainError as error:
        logger.log_domain_error(
            error_code=error.code,
            error_message=error.message
        )
        return create_error_response(
            status_code_for(error.code),
            error.code,
            error.message,
            error.details if error.code == 'CONFLICT' else None
        )

    except Exception as error:
        # Do not log the request body: it carries the password
        logger.log_unexpected_error(
            error_type=type(error).__name__,
            error_message=str(error)
        )
        return create_error_response(500, 'INTERNAL_ERROR', 'An unexpected error occurred')

    finally:
        logger.publish_metrics()
