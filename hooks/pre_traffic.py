import json
import boto3
import os
import logging

logger = logging.getLogger()
logger.setLevel(logging.INFO)

codedeploy = boto3.client('codedeploy')
lambda_client = boto3.client('lambda')

# A GET never reaches EmailJS: the relay must answer 405 without sending mail
SMOKE_TEST_EVENT = {
    'httpMethod': 'GET',
    'body': None,
    'headers': {'User-Agent': 'pre-traffic-hook'}
}


def _invoke(function_name, event):
    """Invoke a function synchronously and return its decoded payload."""
    response = lambda_client.invoke(
        FunctionName=function_name,
        InvocationType='RequestResponse',
        Payload=json.dumps(event)
    )

    response_payload = json.loads(response['Payload'].read())
    logger.info(f"Test response from {function_name}: {json.dumps(response_payload)}")

    if response.get('FunctionError'):
        raise Exception(f"Function returned error: {response_payload}")

    if response.get('StatusCode') != 200:
        raise Exception(f"Unexpected status code: {response.get('StatusCode')}")

    return response_payload


def lambda_handler(event, context):
    """
    Pre-traffic hook for CodeDeploy.
    Runs smoke tests against the new relay version before shifting traffic.
    """
    logger.info(f"Pre-traffic hook triggered: {json.dumps(event)}")

    deployment_id = event['DeploymentId']
    lifecycle_event_hook_execution_id = event['LifecycleEventHookExecutionId']

    try:
        target_function = os.environ.get('TARGET_FUNCTION')
        health_function = os.environ.get('HEALTH_CHECK_FUNCTION')

        if not target_function:
            raise Exception("TARGET_FUNCTION environment variable is not set")

        logger.info(f"Running smoke tests on {target_function}")

        # Test 1: relay rejects non-POST requests
        response_payload = _invoke(target_function, SMOKE_TEST_EVENT)
        if response_payload.get('statusCode') != 405:
            raise Exception(f"Invalid response status: {response_payload.get('statusCode')}")

        body = json.loads(response_payload.get('body') or '{}')
        if 'error' not in body:
            raise Exception(f"Relay response missing error field: {body}")

        # Test 2: health check reports the relay is configured
        if health_function:
            health_payload = _invoke(health_function, {})
            health_body = json.loads(health_payload.get('body') or '{}')
            if health_payload.get('statusCode') != 200 or not health_body.get('emailConfigured'):
                raise Exception(f"Health check failed: {health_body}")

        logger.info("Pre-traffic validation passed")

        # Report success
        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Succeeded'
        )

        return {
            'statusCode': 200,
            'body': json.dumps('Pre-traffic validation succeeded')
        }

    except Exception as e:
        logger.error(f"Pre-traffic validation failed: {str(e)}", exc_info=True)

        # Report failure - this will prevent deployment
        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Failed'
        )

        return {
            'statusCode': 500,
            'body': json.dumps(f'Pre-traffic validation failed: {str(e)}')
        }
