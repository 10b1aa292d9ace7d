"""Tests for the request pipeline: headers, status mapping and error normalization."""

import unittest

import requests

from keyenv import KeyEnv, KeyEnvError, api_client
from keyenv.api_client import APIResponse, InMemoryAPIClient, USER_AGENT
from keyenv.config import settings
from .base import MockedTransportTest, make_response, BASE_URL, TEST_TOKEN


class TestRequestHeaders(MockedTransportTest):

    def test_sends_auth_content_type_and_user_agent(self):
        self.queue(make_response(200, {'data': {'id': 'user-1'}}))

        self.client.get_current_user()

        _, _, kwargs = self.call()
        headers = kwargs['headers']
        self.assertEqual(headers['Authorization'], f'Bearer {TEST_TOKEN}')
        self.assertEqual(headers['Content-Type'], 'application/json')
        self.assertEqual(headers['User-Agent'], USER_AGENT)
        self.assertTrue(USER_AGENT.startswith('keyenv-python/'))

    def test_default_timeout_is_thirty_seconds(self):
        self.queue(make_response(200, {'data': {'id': 'user-1'}}))

        self.client.get_current_user()

        _, _, kwargs = self.call()
        self.assertEqual(kwargs['timeout'], 30.0)

    def test_custom_timeout_in_milliseconds(self):
        client = self.make_client(timeout=5000)
        self.queue(make_response(200, {'data': {'id': 'user-1'}}))

        client.get_current_user()

        _, _, kwargs = self.call()
        self.assertEqual(kwargs['timeout'], 5.0)

    def test_timeout_applies_to_connect_and_each_read(self):
        client = self.make_client(timeout=2500)
        self.queue(make_response(200, {'data': {'id': 'user-1'}}))

        client.get_current_user()

        _, _, kwargs = self.call()
        # A single float is used by requests for both the connect and read phases
        self.assertIsInstance(kwargs['timeout'], float)
        self.assertNotIn('stream', kwargs)

    def test_custom_base_url(self):
        client = self.make_client(base_url='http://localhost:8081/')
        self.queue(make_response(200, {'data': {'id': 'user-1'}}))

        client.get_current_user()

        _, url, _ = self.call()
        self.assertEqual(url, 'http://localhost:8081/api/v1/users/me')


class TestStatusMapping(MockedTransportTest):

    def test_401_uses_error_field_as_message(self):
        self.queue(make_response(401, {'error': 'Invalid token'}))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.message, 'Invalid token')
        self.assertEqual(str(ctx.exception), 'Invalid token')

    def test_403_raises(self):
        self.queue(make_response(403, {'error': 'Access denied'}))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.list_projects()

        self.assertEqual(ctx.exception.status, 403)

    def test_code_and_details_are_carried(self):
        self.queue(make_response(409, {
            'error': 'Secret already exists',
            'code': 'conflict',
            'details': {'key': 'API_KEY'},
        }))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.create_secret('proj-1', 'production', 'API_KEY', 'v')

        self.assertEqual(ctx.exception.status, 409)
        self.assertEqual(ctx.exception.code, 'conflict')
        self.assertEqual(ctx.exception.details, {'key': 'API_KEY'})

    def test_non_json_error_body_falls_back_to_status_text(self):
        self.queue(make_response(502, text='<html>Bad Gateway</html>', reason='Bad Gateway'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.status, 502)
        self.assertEqual(ctx.exception.message, 'Bad Gateway')
        self.assertIsNone(ctx.exception.code)

    def test_json_error_body_without_error_field_falls_back_to_status_text(self):
        self.queue(make_response(500, {'message': 'boom'}, reason='Internal Server Error'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.message, 'Internal Server Error')

    def test_204_resolves_to_none(self):
        self.queue(make_response(204))

        self.assertIsNone(self.client.delete_secret('proj-1', 'production', 'KEY'))

    def test_invalid_json_on_success_raises_status_zero(self):
        self.queue(make_response(200, text='not json'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.status, 0)


class TestTransportFailures(MockedTransportTest):

    def test_timeout_raises_408(self):
        self.queue(requests.Timeout('Read timed out'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.status, 408)
        self.assertEqual(ctx.exception.message, 'Request timeout')

    def test_connect_timeout_raises_408(self):
        self.queue(requests.ConnectTimeout('Connect timed out'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.list_projects()

        self.assertEqual(ctx.exception.status, 408)

    def test_network_error_raises_status_zero_with_message(self):
        self.queue(requests.ConnectionError('Connection refused'))

        with self.assertRaises(KeyEnvError) as ctx:
            self.client.get_current_user()

        self.assertEqual(ctx.exception.status, 0)
        self.assertEqual(ctx.exception.message, 'Connection refused')

    def test_no_retry_after_failure(self):
        self.queue(requests.ConnectionError('Connection refused'), make_response(200, {'data': {'id': 'u'}}))

        with self.assertRaises(KeyEnvError):
            self.client.get_current_user()

        self.assertEqual(self.request_mock.call_count, 1)


class TestAPIResponse(unittest.TestCase):

    def test_ok_range(self):
        self.assertTrue(APIResponse(status_code=200).ok)
        self.assertTrue(APIResponse(status_code=204).ok)
        self.assertFalse(APIResponse(status_code=302).ok)
        self.assertFalse(APIResponse(status_code=404).ok)

    def test_json_raises_value_error_on_empty_body(self):
        with self.assertRaises(ValueError):
            APIResponse(status_code=200, text='').json()


class TestKeyEnvError(unittest.TestCase):

    def test_carries_all_properties(self):
        error = KeyEnvError('Test error', 404, 'not_found', {'id': '123'})

        self.assertEqual(error.message, 'Test error')
        self.assertEqual(error.status, 404)
        self.assertEqual(error.code, 'not_found')
        self.assertEqual(error.details, {'id': '123'})
        self.assertTrue(error.is_not_found)

    def test_optional_fields_default_to_none(self):
        error = KeyEnvError('Network error', 0)

        self.assertIsNone(error.code)
        self.assertIsNone(error.details)
        self.assertFalse(error.is_not_found)


class TestConstruction(unittest.TestCase):

    def test_token_is_required(self):
        with self.assertRaises(ValueError):
            KeyEnv(token='')

    def test_creates_client_with_valid_token(self):
        client = KeyEnv(token='test-token')
        self.assertEqual(client.settings.base_url, BASE_URL)
        self.assertEqual(client.settings.timeout, 30000)

    def test_transports_share_the_settings_default_timeout(self):
        transport = InMemoryAPIClient(test_client=None, token='test-token')

        self.assertIs(api_client.DEFAULT_TIMEOUT_MS, settings.DEFAULT_TIMEOUT_MS)
        self.assertEqual(transport.timeout, settings.DEFAULT_TIMEOUT_MS)
        self.assertEqual(KeyEnv(token='test-token').settings.timeout, transport.timeout)
