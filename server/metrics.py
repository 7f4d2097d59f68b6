"""
Prometheus Metrics Module

Provides instrumentation for the voting API:
- Ballots cast and rejected
- Winner announcements
- Email delivery
- Tally computation time
- API requests

Usage:
    from server.metrics import metrics
    metrics.ballots_cast.labels(channel="invite").inc()
    with metrics.tally_duration.time():
        tally = compute_tally(snapshot, ballots)
"""

from prometheus_client import Counter, Histogram, generate_latest, REGISTRY


class VotingMetrics:
    """Centralized metrics for the voting API"""

    def __init__(self):
        # Voting metrics
        self.ballots_cast = Counter(
            'cyclevote_ballots_cast_total',
            'Total ballots stored',
            ['channel']  # code, invite
        )

        self.ballot_rejections = Counter(
            'cyclevote_ballot_rejections_total',
            'Ballot attempts refused by eligibility rules',
            ['reason']
        )

        self.winners_announced = Counter(
            'cyclevote_winners_announced_total',
            'Manual tie-break announcements'
        )

        self.tally_duration = Histogram(
            'cyclevote_tally_duration_seconds',
            'Time to compute a cycle tally',
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
        )

        # Email metrics
        self.emails_sent = Counter(
            'cyclevote_emails_sent_total',
            'Emails processed by kind and outcome',
            ['kind', 'status']  # kind: invite/winner_summary, status: sent/failed/skipped
        )

        # API metrics
        self.api_requests = Counter(
            'cyclevote_api_requests_total',
            'Total API requests',
            ['endpoint', 'method', 'status_code']
        )

        self.api_request_duration = Histogram(
            'cyclevote_api_request_duration_seconds',
            'API request duration',
            ['endpoint', 'method'],
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
        )

        # Error metrics
        self.errors = Counter(
            'cyclevote_errors_total',
            'Total errors by component and type',
            ['component', 'error_type']
        )

    def record_email(self, kind: str, success: bool):
        self.emails_sent.labels(kind=kind, status='sent' if success else 'failed').inc()

    def record_error(self, component: str, error: Exception):
        """Record an error

        Args:
            component: Component name (api/database/notifications)
            error: Exception instance
        """
        error_type = type(error).__name__
        self.errors.labels(component=component, error_type=error_type).inc()


# Global metrics instance
metrics = VotingMetrics()


def get_metrics_text() -> str:
    """Get Prometheus metrics in text format for the /metrics endpoint"""
    return generate_latest(REGISTRY).decode('utf-8')
