"""Tests for metric identifier construction."""

from collectd_reporter.utils.naming import build_name


class TestBuildName:
    """Test suite for build_name."""

    def test_no_prefix_returns_name(self):
        """Test that a missing prefix leaves the metric name untouched."""
        assert build_name(None, "requests") == "requests"

    def test_empty_prefix_is_dot_join(self):
        """Test that an empty prefix yields the dot-join of components."""
        assert build_name("", "http", "requests", "total") == "http.requests.total"

    def test_prefix_is_prepended(self):
        """Test prefix + '.' + joined components."""
        assert build_name("host1", "http", "requests") == "host1.http.requests"

    def test_dotted_component_passed_verbatim(self):
        """Test that components are not escaped or split."""
        assert build_name("web01.app", "db.pool.active") == "web01.app.db.pool.active"

    def test_empty_components_are_skipped(self):
        """Test that empty and None components never produce empty segments."""
        assert build_name("host1", "", "cache", None, "hits") == "host1.cache.hits"

    def test_no_components(self):
        """Test that a lone prefix is returned as-is."""
        assert build_name("host1") == "host1"
        assert build_name(None) == ""
