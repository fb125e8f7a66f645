"""
Tests for DynamoDBMapperWrapper (core/mapper_wrapper.py)

Every wrapper method must forward its arguments unchanged to exactly one
collaborator call and hand back the collaborator's result (or, for save,
the item itself).
"""

import pytest
from unittest.mock import Mock, patch, sentinel

from botocore.exceptions import ClientError

from dynamodb_mapper import (
    ConflictError,
    ConsistentReads,
    DynamoDBConfig,
    DynamoDBMapper,
    MapperConfig,
    QueryExpression,
    QueryResultPage,
    SaveExpression,
    ScanExpression,
    ScanResultPage,
    create_mapper_wrapper,
)
from tests.helpers import Customer, Order


@pytest.fixture
def config():
    return MapperConfig(consistent_reads=ConsistentReads.CONSISTENT)


@pytest.fixture
def to_save():
    return Customer(customer_id="c-1", name="Ada")


@pytest.fixture
def key():
    return Customer(customer_id="c-1", name="")


@pytest.fixture
def loaded():
    return Customer(customer_id="c-1", name="Ada", loyalty_points=10)


@pytest.fixture
def query_expression():
    return QueryExpression(hash_key_values=Order(customer_id="c-1", order_id=""))


@pytest.fixture
def scan_expression():
    return ScanExpression(limit=10)


class TestUpdate:
    """Test raw update forwarding to the low-level client."""

    def test_update(self, mapper_wrapper, mock_client, mock_mapper):
        """Test update forwards the request to client.update_item."""
        request = {
            'TableName': 'customers',
            'Key': {'customer_id': {'S': 'c-1'}},
            'UpdateExpression': 'SET #n = :n',
            'ExpressionAttributeNames': {'#n': 'name'},
            'ExpressionAttributeValues': {':n': {'S': 'Ada'}},
        }

        result = mapper_wrapper.update(request)

        mock_client.update_item.assert_called_once_with(**request)
        assert result is None
        assert mock_mapper.method_calls == []


class TestSave:
    """Test save forwarding and item pass-through."""

    def test_save_object(self, mapper_wrapper, mock_mapper, to_save):
        result = mapper_wrapper.save(to_save)

        mock_mapper.save.assert_called_once_with(to_save, save_expression=None, config=None)
        assert result is to_save

    def test_save_object_with_config(self, mapper_wrapper, mock_mapper, to_save, config):
        result = mapper_wrapper.save(to_save, config=config)

        mock_mapper.save.assert_called_once_with(to_save, save_expression=None, config=config)
        assert result is to_save

    def test_save_object_with_save_expression(self, mapper_wrapper, mock_mapper, to_save):
        expression = SaveExpression()

        result = mapper_wrapper.save(to_save, save_expression=expression)

        mock_mapper.save.assert_called_once_with(to_save, save_expression=expression, config=None)
        assert result is to_save

    def test_save_object_with_save_expression_and_config(self, mapper_wrapper, mock_mapper, to_save, config):
        expression = SaveExpression()

        result = mapper_wrapper.save(to_save, save_expression=expression, config=config)

        mock_mapper.save.assert_called_once_with(to_save, save_expression=expression, config=config)
        assert result is to_save

    def test_config_in_positional_slot_is_rejected(self, mapper_wrapper, mock_mapper, to_save, config):
        with pytest.raises(TypeError):
            mapper_wrapper.save(to_save, config)

        mock_mapper.save.assert_not_called()

    def test_save_returns_item_regardless_of_mapper_result(self, mapper_wrapper, mock_mapper, to_save):
        """Test the item is returned even if the mapper returns something else."""
        mock_mapper.save.return_value = sentinel.other

        assert mapper_wrapper.save(to_save) is to_save


class TestLoad:
    """Test load forwarding and optional results."""

    def test_load_object(self, mapper_wrapper, mock_mapper, key, loaded):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(key)

        mock_mapper.load.assert_called_once_with(key, hash_key=None, range_key=None, config=None)
        assert result is loaded

    def test_load_object_with_config(self, mapper_wrapper, mock_mapper, key, loaded, config):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(key, config=config)

        mock_mapper.load.assert_called_once_with(key, hash_key=None, range_key=None, config=config)
        assert result is loaded

    def test_load_class_with_hash_key(self, mapper_wrapper, mock_mapper, loaded):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(Customer, "c-1")

        mock_mapper.load.assert_called_once_with(Customer, hash_key="c-1", range_key=None, config=None)
        assert result is loaded

    def test_load_class_with_hash_key_and_range_key(self, mapper_wrapper, mock_mapper, loaded):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(Order, "c-1", "o-1")

        mock_mapper.load.assert_called_once_with(Order, hash_key="c-1", range_key="o-1", config=None)
        assert result is loaded

    def test_load_class_with_hash_key_and_config(self, mapper_wrapper, mock_mapper, loaded, config):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(Customer, "c-1", config=config)

        mock_mapper.load.assert_called_once_with(Customer, hash_key="c-1", range_key=None, config=config)
        assert result is loaded

    def test_load_class_with_hash_key_and_range_key_and_config(self, mapper_wrapper, mock_mapper, loaded, config):
        mock_mapper.load.return_value = loaded

        result = mapper_wrapper.load(Order, "c-1", "o-1", config=config)

        mock_mapper.load.assert_called_once_with(Order, hash_key="c-1", range_key="o-1", config=config)
        assert result is loaded

    def test_config_after_range_key_is_rejected(self, mapper_wrapper, mock_mapper, config):
        with pytest.raises(TypeError):
            mapper_wrapper.load(Order, "c-1", "o-1", config)

        mock_mapper.load.assert_not_called()

    def test_load_absent_returns_none(self, mapper_wrapper, mock_mapper, key):
        mock_mapper.load.return_value = None

        assert mapper_wrapper.load(key) is None
        mock_mapper.load.assert_called_once()


class TestQueryAndScan:
    """Test query/scan forwarding returns collaborator results verbatim."""

    def test_query_with_query_expression(self, mapper_wrapper, mock_mapper, query_expression):
        mock_mapper.query.return_value = sentinel.query_list

        result = mapper_wrapper.query(Order, query_expression)

        mock_mapper.query.assert_called_once_with(Order, query_expression, config=None)
        assert result is sentinel.query_list

    def test_query_with_query_expression_and_config(self, mapper_wrapper, mock_mapper, query_expression, config):
        mock_mapper.query.return_value = sentinel.query_list

        result = mapper_wrapper.query(Order, query_expression, config=config)

        mock_mapper.query.assert_called_once_with(Order, query_expression, config=config)
        assert result is sentinel.query_list

    def test_query_page_with_query_expression(self, mapper_wrapper, mock_mapper, query_expression):
        page = QueryResultPage()
        mock_mapper.query_page.return_value = page

        result = mapper_wrapper.query_page(Order, query_expression)

        mock_mapper.query_page.assert_called_once_with(Order, query_expression, config=None)
        assert result is page

    def test_query_page_with_query_expression_and_config(self, mapper_wrapper, mock_mapper, query_expression, config):
        page = QueryResultPage()
        mock_mapper.query_page.return_value = page

        result = mapper_wrapper.query_page(Order, query_expression, config=config)

        mock_mapper.query_page.assert_called_once_with(Order, query_expression, config=config)
        assert result is page

    def test_scan_with_scan_expression(self, mapper_wrapper, mock_mapper, scan_expression):
        mock_mapper.scan.return_value = sentinel.scan_list

        result = mapper_wrapper.scan(Customer, scan_expression)

        mock_mapper.scan.assert_called_once_with(Customer, scan_expression, config=None)
        assert result is sentinel.scan_list

    def test_scan_with_scan_expression_and_config(self, mapper_wrapper, mock_mapper, scan_expression, config):
        mock_mapper.scan.return_value = sentinel.scan_list

        result = mapper_wrapper.scan(Customer, scan_expression, config=config)

        mock_mapper.scan.assert_called_once_with(Customer, scan_expression, config=config)
        assert result is sentinel.scan_list

    def test_scan_page_with_scan_expression(self, mapper_wrapper, mock_mapper, scan_expression):
        page = ScanResultPage()
        mock_mapper.scan_page.return_value = page

        result = mapper_wrapper.scan_page(Customer, scan_expression)

        mock_mapper.scan_page.assert_called_once_with(Customer, scan_expression, config=None)
        assert result is page

    def test_scan_page_with_scan_expression_and_config(self, mapper_wrapper, mock_mapper, scan_expression, config):
        page = ScanResultPage()
        mock_mapper.scan_page.return_value = page

        result = mapper_wrapper.scan_page(Customer, scan_expression, config=config)

        mock_mapper.scan_page.assert_called_once_with(Customer, scan_expression, config=config)
        assert result is page

    def test_empty_query_result_is_returned_not_none(self, mapper_wrapper, mock_mapper, query_expression):
        """Test an empty result page is a present result."""
        empty_page = QueryResultPage(results=[])
        mock_mapper.query_page.return_value = empty_page

        assert mapper_wrapper.query_page(Order, query_expression) is empty_page


class TestErrorPropagation:
    """Test collaborator errors reach the caller unchanged."""

    def test_mapper_error_propagates(self, mapper_wrapper, mock_mapper, to_save):
        error = ConflictError("Conditional check failed", "c-1")
        mock_mapper.save.side_effect = error

        with pytest.raises(ConflictError) as exc_info:
            mapper_wrapper.save(to_save)

        assert exc_info.value is error

    def test_client_error_propagates_untranslated(self, mapper_wrapper, mock_client):
        error = ClientError(
            error_response={'Error': {'Code': 'ValidationException', 'Message': 'bad'}},
            operation_name='UpdateItem'
        )
        mock_client.update_item.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            mapper_wrapper.update({'TableName': 'customers'})

        assert exc_info.value is error


class TestCreateMapperWrapper:
    """Test the wrapper factory."""

    def test_builds_wrapper_over_resource_client(self, dynamodb_config):
        with patch('dynamodb_mapper.core.mapper_wrapper.create_dynamodb_resource') as mock_create:
            resource = Mock()
            mock_create.return_value = resource

            wrapper = create_mapper_wrapper(dynamodb_config)

            mock_create.assert_called_once_with(dynamodb_config)
            assert isinstance(wrapper.mapper, DynamoDBMapper)
            assert wrapper.mapper.dynamodb is resource
            assert wrapper.client is resource.meta.client

    def test_table_names_carry_prefix_and_environment(self, dynamodb_config):
        with patch('dynamodb_mapper.core.mapper_wrapper.create_dynamodb_resource'):
            wrapper = create_mapper_wrapper(dynamodb_config)

        assert wrapper.mapper.get_table_name(Customer) == "app_test_customers"
        assert wrapper.mapper.get_table_name(Customer) == dynamodb_config.get_table_name("customers")

    def test_prod_without_prefix_keeps_declared_names(self):
        config = DynamoDBConfig(environment="prod", table_prefix="")

        with patch('dynamodb_mapper.core.mapper_wrapper.create_dynamodb_resource'):
            wrapper = create_mapper_wrapper(config)

        assert wrapper.mapper.get_table_name(Customer) == "customers"

    def test_mapper_config_is_merged(self, dynamodb_config):
        mapper_config = MapperConfig(consistent_reads=ConsistentReads.CONSISTENT)

        with patch('dynamodb_mapper.core.mapper_wrapper.create_dynamodb_resource'):
            wrapper = create_mapper_wrapper(dynamodb_config, mapper_config)

        assert wrapper.mapper.config.consistent_read is True
        assert wrapper.mapper.get_table_name(Order) == "app_test_orders"
