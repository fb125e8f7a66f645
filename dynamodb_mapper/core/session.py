import logging

import boto3
from botocore.config import Config

from ..config import DynamoDBConfig
from ..exceptions import ConnectionError

logger = logging.getLogger(__name__)


def create_dynamodb_resource(config: DynamoDBConfig):
    """Create a boto3 DynamoDB service resource from connection settings.

    Args:
        config: DynamoDB connection configuration

    Returns:
        boto3 DynamoDB ServiceResource; its low-level client is ``resource.meta.client``

    Raises:
        ConnectionError: If the session or resource cannot be created
    """
    try:
        session = boto3.Session(
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region_name
        )

        dynamodb_config = {
            'region_name': config.region_name
        }

        if config.endpoint_url:
            dynamodb_config['endpoint_url'] = config.endpoint_url

        # Add retry and timeout configuration
        boto_config = Config(
            retries={'max_attempts': config.retries},
            max_pool_connections=config.max_pool_connections,
            read_timeout=config.timeout_seconds,
            connect_timeout=config.timeout_seconds
        )
        dynamodb_config['config'] = boto_config

        return session.resource('dynamodb', **dynamodb_config)
    except Exception as e:
        logger.error(f"Failed to create DynamoDB resource: {e}")
        raise ConnectionError(f"Failed to connect to DynamoDB: {e}", e) from e
