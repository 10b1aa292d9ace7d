"""Tests for client settings resolution, logging bootstrap and environment writers."""

import logging
import os
import unittest
from unittest.mock import patch

from keyenv import DictEnvironmentWriter, KeyEnvConfigError, ProcessEnvironmentWriter
from keyenv.config.logging import LOG_LEVEL_ENV_VAR, bootstrap_logging
from keyenv.config.settings import (
    API_URL_ENV_VAR,
    CACHE_TTL_ENV_VAR,
    DEFAULT_BASE_URL,
    resolve_settings,
)


class TestResolveSettings(unittest.TestCase):

    def test_defaults(self):
        settings = resolve_settings('tok', environ={})

        self.assertEqual(settings.token, 'tok')
        self.assertEqual(settings.timeout, 30000)
        self.assertEqual(settings.base_url, DEFAULT_BASE_URL)
        self.assertEqual(settings.cache_ttl, 0)

    def test_missing_token(self):
        for token in (None, ''):
            with self.subTest(token=token):
                with self.assertRaises(KeyEnvConfigError):
                    resolve_settings(token, environ={})

    def test_non_positive_timeout(self):
        with self.assertRaises(KeyEnvConfigError):
            resolve_settings('tok', timeout=0, environ={})

    def test_environment_variables_apply(self):
        environ = {API_URL_ENV_VAR: 'http://localhost:8081/', CACHE_TTL_ENV_VAR: '120'}

        settings = resolve_settings('tok', environ=environ)

        self.assertEqual(settings.base_url, 'http://localhost:8081')
        self.assertEqual(settings.cache_ttl, 120)

    def test_constructor_arguments_take_precedence(self):
        environ = {API_URL_ENV_VAR: 'http://localhost:8081', CACHE_TTL_ENV_VAR: '120'}

        settings = resolve_settings('tok', base_url='https://keyenv.internal', cache_ttl=0, environ=environ)

        self.assertEqual(settings.base_url, 'https://keyenv.internal')
        self.assertEqual(settings.cache_ttl, 0)

    def test_invalid_cache_ttl_disables_cache(self):
        with self.assertLogs('keyenv.config.settings', level='WARNING'):
            settings = resolve_settings('tok', environ={CACHE_TTL_ENV_VAR: 'five minutes'})

        self.assertEqual(settings.cache_ttl, 0)

    def test_repr_hides_token(self):
        settings = resolve_settings('super-secret-token', environ={})

        self.assertNotIn('super-secret-token', repr(settings))

    def test_reads_process_environment_by_default(self):
        with patch.dict(os.environ, {API_URL_ENV_VAR: 'http://env-host'}):
            settings = resolve_settings('tok')

        self.assertEqual(settings.base_url, 'http://env-host')


class TestEnvironmentWriters(unittest.TestCase):

    def test_process_writer_overwrites_os_environ(self):
        writer = ProcessEnvironmentWriter()
        with patch.dict(os.environ, {'KEYENV_TEST_VAR': 'old'}):
            writer.set('KEYENV_TEST_VAR', 'new')

            self.assertEqual(os.environ['KEYENV_TEST_VAR'], 'new')
            self.assertEqual(writer.get('KEYENV_TEST_VAR'), 'new')

    def test_dict_writer_uses_given_mapping(self):
        target = {}
        writer = DictEnvironmentWriter(target)

        writer.set('A', '1')

        self.assertEqual(target, {'A': '1'})
        self.assertIsNone(writer.get('B'))


class TestBootstrapLogging(unittest.TestCase):

    def setUp(self):
        self.logger = logging.getLogger('keyenv')
        self.original_level = self.logger.level
        self.addCleanup(self.logger.setLevel, self.original_level)

    def test_env_level_applies_to_keyenv_logger(self):
        with patch.dict(os.environ, {LOG_LEVEL_ENV_VAR: 'debug'}):
            bootstrap_logging(force=True)

        self.assertEqual(self.logger.level, logging.DEBUG)

    def test_invalid_env_level_is_ignored(self):
        self.logger.setLevel(logging.WARNING)

        with patch.dict(os.environ, {LOG_LEVEL_ENV_VAR: 'chatty'}):
            bootstrap_logging(force=True)

        self.assertEqual(self.logger.level, logging.WARNING)
