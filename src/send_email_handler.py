"""
AWS Lambda handler for the contact form email relay.

Thin orchestration layer that delegates to RelayProcessor.
Policy: never raise; every outcome is rendered as a JSON proxy response.
"""

import json
import logging
import os
from typing import Dict, Any

from domain.relay_processor import RelayProcessor
from services import config as config_service

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')

# Stateless processor, reused across invocations
relay_processor = RelayProcessor()


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Relay one contact form submission to EmailJS.

    Expected event format (API Gateway proxy):
    {
        "httpMethod": "POST",
        "body": "{\"from_name\": ..., \"reply_to\": ..., \"subject\": ..., \"message\": ...}"
    }

    Args:
        event: Lambda proxy event
        context: Lambda context

    Returns:
        Dict with statusCode, headers and a JSON body
    """
    request_id = getattr(context, 'aws_request_id', None) or getattr(context, 'request_id', 'UNKNOWN')
    logger.info(f"Environment: {ENVIRONMENT}, request: {request_id}")

    result = relay_processor.handle(event)

    if result.success:
        logger.info(f"✓ Relay request {request_id} succeeded: {result!r}")
    else:
        logger.warning(f"⚠ Relay request {request_id} failed: {result!r}")

    return result.to_response()


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({
            'status': 'healthy',
            'environment': ENVIRONMENT,
            'emailConfigured': config_service.is_configured()
        })
    }
