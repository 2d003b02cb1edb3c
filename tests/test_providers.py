import unittest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from src.domain.models import RubyGem, TravisReport
from src.infrastructure.rubygems_client import RubyGemsClient
from src.infrastructure.travis_client import TravisClient


def _response(payload, error=None):
    resp = AsyncMock()
    resp.status = 200
    resp.raise_for_status = MagicMock(side_effect=error)
    resp.json = AsyncMock(return_value=payload)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _session(resp):
    session = AsyncMock()
    session.get = MagicMock(return_value=resp)
    return session


def _not_found():
    return aiohttp.ClientResponseError(request_info=MagicMock(), history=(), status=404)


class TestRubyGemsClient(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_gem(self) -> None:
        session = _session(_response({"name": "widget", "version": "2.1.0", "downloads": 100}))

        gem = await RubyGemsClient().fetch_gem(session, "widget")

        self.assertEqual(gem.name, "widget")
        self.assertEqual(gem.version, "2.1.0")
        self.assertEqual(session.get.call_args.args[0], "https://rubygems.org/api/v1/gems/widget.json")

    async def test_unknown_gem_is_unavailable(self) -> None:
        session = _session(_response(None, error=_not_found()))

        gem = await RubyGemsClient().fetch_gem(session, "nope")

        self.assertEqual(gem, RubyGem.unavailable("nope"))
        self.assertEqual(gem.downloads, -1)

    async def test_empty_name_skips_request(self) -> None:
        session = _session(_response({}))

        gem = await RubyGemsClient().fetch_gem(session, "")

        self.assertEqual(gem, RubyGem.unavailable())
        session.get.assert_not_called()


class TestTravisClient(unittest.IsolatedAsyncioTestCase):
    def test_token_is_optional(self) -> None:
        self.assertNotIn("Authorization", TravisClient().headers)
        self.assertEqual(TravisClient(token="abc").headers["Authorization"], "token abc")

    async def test_fetch_report_encodes_slug(self) -> None:
        session = _session(_response({"last_build": {"id": 1, "number": "7", "state": "failed"}}))

        report = await TravisClient().fetch_report(session, "acme/widget", "master")

        self.assertEqual(report.state, "failed")
        self.assertEqual(report.build_number, 7)
        self.assertEqual(
            session.get.call_args.args[0],
            "https://api.travis-ci.com/repo/acme%2Fwidget/branch/master",
        )
        self.assertEqual(session.get.call_args.kwargs["headers"]["Travis-API-Version"], "3")

    async def test_error_is_unavailable(self) -> None:
        session = _session(_response(None, error=_not_found()))

        report = await TravisClient().fetch_report(session, "acme/widget", "master")

        self.assertEqual(report, TravisReport.unavailable("acme/widget", "master"))
        self.assertEqual(report.build_number, -1)
