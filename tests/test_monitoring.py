"""
Tests for request monitoring and the end-of-run summaries.
"""

from unittest import mock

from sharepoint_provision.monitoring import RateLimitMonitor, print_rate_limiting_summary, rate_monitor


def response_with(status_code=200, headers=None):
    response = mock.Mock()
    response.status_code = status_code
    response.headers = headers or {}
    return response


class TestRateLimitMonitor:

    def test_warning_level_counts_an_alert(self, capsys):
        monitor = RateLimitMonitor()

        monitor.analyze_response(response_with(headers={'x-ms-throttle-limit-percentage': '0.85'}))

        assert monitor.metrics['alerts_triggered'] == 1
        assert monitor.metrics['max_throttle_percentage'] == 0.85
        assert 'Rate limit warning' in capsys.readouterr().out

    def test_below_threshold_is_not_an_alert(self):
        monitor = RateLimitMonitor()
        monitor.analyze_response(response_with())
        assert monitor.metrics['alerts_triggered'] == 0

    def test_throttled_response_is_counted(self):
        monitor = RateLimitMonitor()
        monitor.analyze_response(response_with(429, {'x-ms-throttle-limit-percentage': '1.2'}), is_write=True)
        assert monitor.metrics['throttled_requests'] == 1
        assert monitor.metrics['write_requests'] == 1
        assert monitor.should_slow_down()


class TestPrintRateLimitingSummary:

    def test_reports_triggered_alerts(self, capsys):
        rate_monitor.analyze_response(response_with(headers={'x-ms-throttle-limit-percentage': '0.85'}))
        rate_monitor.analyze_response(response_with(headers={'x-ms-throttle-limit-percentage': '0.9'}))
        capsys.readouterr()

        print_rate_limiting_summary()

        output = capsys.readouterr().out
        (line,) = [text for text in output.splitlines() if 'Alerts Triggered:' in text]
        assert line.split(':')[1].strip() == '2'
        assert 'CAUTION: Approached throttling limits' in output
