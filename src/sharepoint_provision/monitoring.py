# -*- coding: utf-8 -*-
"""
Rate limiting monitoring and statistics tracking for SharePoint provisioning.

This module provides classes for monitoring SharePoint throttling headers and
tracking what each provisioning run created, updated or left unchanged.
"""

from .utils import is_debug_enabled


class RateLimitMonitor:
    """
    Monitor and track SharePoint rate limiting metrics.

    Analyzes response headers to detect and track throttling:
    - x-ms-throttle-limit-percentage: Utilization percentage (0.8-1.8 range)
    - x-ms-resource-unit: Resource units consumed per request

    Headers only appear when >80% of limit consumed.
    """

    def __init__(self):
        """Initialize rate limit monitoring metrics"""
        self.metrics = {
            'total_requests': 0,
            'throttled_requests': 0,
            'write_requests': 0,
            'max_throttle_percentage': 0.0,
            'resource_units_consumed': 0,
            'alerts_triggered': 0
        }
        self.throttle_threshold = 0.8  # Alert when >80% of limit

    def reset(self):
        """Clear all collected metrics"""
        self.__init__()

    def analyze_response(self, response, is_write=False):
        """
        Record a response and analyze its headers for rate limiting info.

        Args:
            response: requests.Response object from SharePoint
            is_write (bool): Whether the request was a mutating call
        """
        self.metrics['total_requests'] += 1
        if is_write:
            self.metrics['write_requests'] += 1

        headers = response.headers
        throttle_percentage = headers.get('x-ms-throttle-limit-percentage')
        resource_unit = headers.get('x-ms-resource-unit')

        if response.status_code == 429:
            self.metrics['throttled_requests'] += 1

        if throttle_percentage:
            percentage = float(throttle_percentage)
            self.metrics['max_throttle_percentage'] = max(
                self.metrics['max_throttle_percentage'],
                percentage
            )
            if percentage >= 1.0:
                print(f"[!] THROTTLING DETECTED: {percentage:.1%} of limit used")
            elif percentage >= self.throttle_threshold:
                self.metrics['alerts_triggered'] += 1
                print(f"[ ] Rate limit warning: {percentage:.1%} of limit used")

        if resource_unit:
            units = int(resource_unit)
            self.metrics['resource_units_consumed'] += units
            if is_debug_enabled():
                print(f"[=] Resource units consumed: {units}")

    def should_slow_down(self):
        """
        Determine if requests should be slowed down proactively.

        Returns:
            bool: True if approaching rate limits (>90% utilization)
        """
        return self.metrics['max_throttle_percentage'] >= 0.9


# Global rate limit monitor instance
rate_monitor = RateLimitMonitor()


def print_rate_limiting_summary():
    """Print request and throttling statistics collected during execution."""
    metrics = rate_monitor.metrics

    print("\n" + "="*60)
    print("SHAREPOINT REQUEST SUMMARY")
    print("="*60)
    print(f"[STATS] API Request Statistics:")
    print(f"   - Total API Requests:       {metrics['total_requests']:>6}")
    print(f"   - Write Requests:           {metrics['write_requests']:>6}")
    print(f"   - Throttled Requests:       {metrics['throttled_requests']:>6}")
    print(f"   - Max Throttle %:           {metrics['max_throttle_percentage']:>6.1%}")
    print(f"   - Resource Units Used:      {metrics['resource_units_consumed']:>6}")
    print(f"   - Alerts Triggered:         {metrics['alerts_triggered']:>6}")

    if metrics['max_throttle_percentage'] >= 1.0:
        print(f"\n[!] WARNING: Hit throttling limits during execution")
    elif metrics['max_throttle_percentage'] >= 0.8:
        print(f"\n[ ] CAUTION: Approached throttling limits")
    else:
        print(f"\n[OK] Stayed within throttling limits")
    print("="*60)


class ProvisioningStatistics:
    """Track reconciliation outcomes for a provisioning run"""

    def __init__(self):
        """Initialize provisioning statistics"""
        self.stats = {
            'fields_created': 0,
            'fields_updated': 0,
            'fields_unchanged': 0,
            'views_created': 0,
            'views_updated': 0,
            'views_unchanged': 0,
            'filter_drift_warnings': 0
        }

    def reset(self):
        self.__init__()

    def record(self, kind, outcome):
        """
        Count one reconciler result.

        Args:
            kind (str): 'fields' or 'views'
            outcome (str): 'created', 'updated' or 'unchanged'
        """
        self.stats[f"{kind}_{outcome}"] += 1

    def total_changes(self):
        return (self.stats['fields_created'] + self.stats['fields_updated'] +
                self.stats['views_created'] + self.stats['views_updated'])

    def print_summary(self, whatif_mode=False):
        """
        Print final summary report of provisioning statistics.

        Args:
            whatif_mode (bool): Whether changes were only reported, not written
        """
        label = " (WhatIf)" if whatif_mode else ""

        print(f"[STATS] Field Statistics{label}:")
        print(f"   - Fields created:           {self.stats['fields_created']:>6}")
        print(f"   - Fields updated:           {self.stats['fields_updated']:>6}")
        print(f"   - Fields unchanged:         {self.stats['fields_unchanged']:>6}")
        print(f"\n[STATS] View Statistics{label}:")
        print(f"   - Views created:            {self.stats['views_created']:>6}")
        print(f"   - Views updated:            {self.stats['views_updated']:>6}")
        print(f"   - Views unchanged:          {self.stats['views_unchanged']:>6}")

        if self.stats['filter_drift_warnings'] > 0:
            print(f"\n[!] {self.stats['filter_drift_warnings']} view(s) have a live filter that differs from the declared one")
            print("    Existing view filters are never changed; edit them in SharePoint if needed")


# Global provisioning statistics instance
provisioning_stats = ProvisioningStatistics()
