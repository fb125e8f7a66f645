"""
Test configuration and fixtures for the DynamoDB mapper.

Provides mocked collaborators for wrapper tests and a moto-backed DynamoDB
resource with the sample tables created for mapper tests.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

# Add parent directory to path so we can import dynamodb_mapper
sys.path.insert(0, str(Path(__file__).parent.parent))

import boto3
import pytest
from moto import mock_aws

from dynamodb_mapper import DynamoDBConfig, DynamoDBMapper, DynamoDBMapperWrapper
from tests.helpers import Customer, Order


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so no test can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def dynamodb_config():
    """DynamoDB connection configuration for testing."""
    return DynamoDBConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,
        environment="test",
        table_prefix="app"
    )


# Wrapper fixtures (mocked collaborators)

@pytest.fixture
def mock_mapper():
    """Mapper double that records every call."""
    return Mock(spec=DynamoDBMapper)


@pytest.fixture
def mock_client():
    """Low-level client double."""
    return Mock()


@pytest.fixture
def mapper_wrapper(mock_mapper, mock_client):
    return DynamoDBMapperWrapper(mock_mapper, mock_client)


# Mapper fixtures (moto)

@pytest.fixture
def mock_dynamodb_resource():
    """Mock DynamoDB resource."""
    with mock_aws():
        yield boto3.resource('dynamodb', region_name='us-east-1')


@pytest.fixture
def mapper(mock_dynamodb_resource):
    return DynamoDBMapper(mock_dynamodb_resource)


@pytest.fixture
def customers_table(mock_dynamodb_resource, mapper):
    """Create the customers table from Customer.Meta."""
    return mock_dynamodb_resource.create_table(**mapper.create_table_request(Customer))


@pytest.fixture
def orders_table(mock_dynamodb_resource, mapper):
    """Create the orders table (with StatusIndex) from Order.Meta."""
    return mock_dynamodb_resource.create_table(**mapper.create_table_request(Order))


@pytest.fixture
def all_tables(customers_table, orders_table):
    return {
        'customers': customers_table,
        'orders': orders_table,
    }
