import unittest

from src.domain.exceptions import ProviderException
from src.infrastructure.acl import GitHubTranslator, RubyGemsTranslator, TravisTranslator


class TestGitHubTranslator(unittest.TestCase):
    def test_full_names_keeps_listing_order(self) -> None:
        raw = [{"full_name": "acme/zeta"}, {"full_name": "acme/alpha"}, {"name": "no-full-name"}]

        self.assertEqual(GitHubTranslator.full_names(raw), ["acme/zeta", "acme/alpha"])

    def test_last_week_total_uses_most_recent_week(self) -> None:
        raw = [{"total": 4, "week": 1}, {"total": 9, "week": 2}]

        self.assertEqual(GitHubTranslator.last_week_total(raw), 9)

    def test_empty_commit_activity_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.last_week_total([])

    def test_non_object_repository_entry_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.full_names(["not-a-dict"])

    def test_week_without_total_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.last_week_total([{"total": 3}, {"week": 2}])

    def test_non_object_week_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.last_week_total([{"total": 3}, None])

    def test_non_object_repository_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.open_issues_count(["open_issues_count"])

    def test_missing_tag_name_raises(self) -> None:
        with self.assertRaises(ProviderException):
            GitHubTranslator.tag_name({"name": "Release without tag"})


class TestRubyGemsTranslator(unittest.TestCase):
    def test_to_domain_reads_release_fields(self) -> None:
        raw = {
            "name": "widget",
            "version": "2.1.0",
            "downloads": 12345,
            "version_downloads": 67,
            "homepage_uri": None,
        }

        gem = RubyGemsTranslator.to_domain(raw)

        self.assertEqual(gem.version, "2.1.0")
        self.assertEqual(gem.downloads, 12345)
        self.assertEqual(gem.homepage_uri, "")

    def test_document_without_name_raises(self) -> None:
        with self.assertRaises(ProviderException):
            RubyGemsTranslator.to_domain({"version": "1.0.0"})


class TestTravisTranslator(unittest.TestCase):
    def test_to_domain_reads_last_build(self) -> None:
        raw = {
            "name": "master",
            "last_build": {
                "id": 987,
                "number": "42",
                "state": "passed",
                "finished_at": "2024-01-02T03:04:05Z",
            },
        }

        report = TravisTranslator.to_domain(raw, "acme/widget", "master")

        self.assertEqual(report.state, "passed")
        self.assertEqual(report.build_number, 42)
        self.assertEqual(report.build_url, "https://app.travis-ci.com/acme/widget/builds/987")

    def test_branch_without_builds_raises(self) -> None:
        with self.assertRaises(ProviderException):
            TravisTranslator.to_domain({"name": "master", "last_build": None}, "acme/widget", "master")

    def test_non_object_last_build_raises(self) -> None:
        with self.assertRaises(ProviderException):
            TravisTranslator.to_domain({"last_build": "passed"}, "acme/widget", "master")
