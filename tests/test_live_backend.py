"""
Smoke tests against a running backend ($CLEANVIEW_API_URL). Run with --run-web.
"""

import unittest

import pytest

from cleanview.api_client import BackendClient
from cleanview.config import ClientConfig
from cleanview.identity import StaticIdentityProvider


@pytest.mark.web
class TestLiveBackend(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.client = BackendClient(ClientConfig.from_env(), StaticIdentityProvider())

    async def test_health(self):
        status = await self.client.check_health()
        self.assertIn('status', status)

    async def test_new_user_has_no_datasets(self):
        self.assertEqual(await self.client.list_datasets(), [])
