"""Tests for the one-line API call log format."""

from shared.middleware import LOG_LINE_LIMIT, format_api_log_line


class TestFormatApiLogLine:
    def test_without_preview(self):
        assert format_api_log_line("GET", "/api/products", 200, 12, None) == "GET /api/products 200 in 12ms"

    def test_with_preview(self):
        line = format_api_log_line("POST", "/api/cart/items", 201, 3, '{"ok":true}')
        assert line == 'POST /api/cart/items 201 in 3ms :: {"ok":true}'

    def test_long_lines_are_truncated_with_an_ellipsis(self):
        line = format_api_log_line("GET", "/api/products", 200, 5, '{"items":[' + "x" * 200 + "]}")
        assert len(line) == LOG_LINE_LIMIT
        assert line.endswith("…")
        assert line.startswith("GET /api/products 200 in 5ms :: {")

    def test_line_at_the_limit_is_kept_whole(self):
        prefix = "GET /api/products 200 in 5ms :: "
        preview = "y" * (LOG_LINE_LIMIT - len(prefix))
        line = format_api_log_line("GET", "/api/products", 200, 5, preview)
        assert line == prefix + preview
        assert not line.endswith("…")
