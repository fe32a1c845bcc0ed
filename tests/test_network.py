"""Tests for the cached network reachability probe."""

import urllib.error
from unittest.mock import patch

from quillstack.network import NetworkProbe


class TestNetworkProbe:
    @patch("quillstack.network.urllib.request.urlopen")
    def test_reachable(self, mock_urlopen, clock):
        probe = NetworkProbe("https://api.example.com", clock=clock)
        assert probe.is_reachable() is True
        request = mock_urlopen.call_args.args[0]
        assert request.get_method() == "HEAD"
        assert mock_urlopen.call_args.kwargs["timeout"] == 3.0

    @patch("quillstack.network.urllib.request.urlopen")
    def test_http_error_counts_as_reachable(self, mock_urlopen, clock):
        mock_urlopen.side_effect = urllib.error.HTTPError(
            "https://api.example.com", 405, "Method Not Allowed", None, None
        )
        assert NetworkProbe("https://api.example.com", clock=clock).is_reachable() is True

    @patch("quillstack.network.urllib.request.urlopen")
    def test_unreachable(self, mock_urlopen, clock):
        mock_urlopen.side_effect = urllib.error.URLError("no route to host")
        assert NetworkProbe("https://api.example.com", clock=clock).is_reachable() is False

    @patch("quillstack.network.urllib.request.urlopen")
    def test_timeout(self, mock_urlopen, clock):
        mock_urlopen.side_effect = TimeoutError()
        assert NetworkProbe("https://api.example.com", clock=clock).is_reachable() is False

    @patch("quillstack.network.urllib.request.urlopen")
    def test_answer_cached_for_ttl(self, mock_urlopen, clock):
        probe = NetworkProbe("https://api.example.com", ttl_seconds=30, clock=clock)
        probe.is_reachable()
        clock.advance(29)
        probe.is_reachable()
        assert mock_urlopen.call_count == 1

        clock.advance(1)
        mock_urlopen.side_effect = urllib.error.URLError("offline")
        assert probe.is_reachable() is False
        assert mock_urlopen.call_count == 2
