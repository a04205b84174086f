"""Slack webhook client for payroll risk alerts, with exponential backoff retry"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from payroll_sentinel.config import settings
from payroll_sentinel.domain.formatting import format_currency, generate_risk_summary, get_risk_level_emoji
from payroll_sentinel.domain.models import RiskAssessment, RiskLevel
from payroll_sentinel.domain.risk_engine import calculate_risk_score
from payroll_sentinel.infrastructure.observability.metrics import alert_latency_histogram, alert_failure_counter

logger = logging.getLogger(__name__)

ALERT_LEVELS = {RiskLevel.WARNING, RiskLevel.CRITICAL}


def _field(label: str, value: str) -> Dict[str, str]:
    return {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}


class SlackNotifier:
    """Sends risk assessments to a Slack incoming webhook"""

    def __init__(
        self,
        webhook_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url or settings.slack_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.alert_max_retries
        self.backoff_base = settings.alert_backoff_base
        self.transport = transport

    @staticmethod
    def should_alert(assessment: RiskAssessment) -> bool:
        return assessment.risk_level in ALERT_LEVELS

    def build_message(self, assessment: RiskAssessment, company_name: Optional[str] = None) -> Dict[str, Any]:
        """Render an assessment as a Slack text + blocks payload"""
        name = company_name or assessment.company_id
        emoji = get_risk_level_emoji(assessment.risk_level)
        headline = f"{emoji} *Payroll Cash Flow Alert* - {name}"

        shortfall = assessment.required_float - assessment.current_balance
        if shortfall > 0:
            status = f"Shortfall: {format_currency(shortfall)}"
        else:
            status = f"Surplus: {format_currency(abs(shortfall))}"

        fields = [
            _field("Current Balance", format_currency(assessment.current_balance)),
            _field("Required Float", format_currency(assessment.required_float)),
        ]
        if assessment.next_payroll_amount is not None:
            fields.append(_field("Payroll Amount", format_currency(assessment.next_payroll_amount)))
        if assessment.next_payroll_date is not None:
            fields.append(_field("Pay Date", assessment.next_payroll_date.isoformat()))
        fields.append(_field("Days Until Payroll", f"{assessment.days_until_risk} days"))
        fields.append(_field("Risk Status", status))

        blocks: List[Dict[str, Any]] = [
            {"type": "section", "text": {"type": "mrkdwn", "text": headline}},
            {"type": "section", "fields": fields},
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*Risk Score:* {calculate_risk_score(assessment)}/100",
                },
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": "\n".join(f"• {r}" for r in assessment.recommendations),
                },
            },
            {"type": "divider"},
            {
                "type": "context",
                "elements": [
                    {"type": "mrkdwn", "text": f"Assessed at {assessment.assessment_date.isoformat()}"},
                ],
            },
        ]

        return {"text": generate_risk_summary(assessment), "blocks": blocks}

    async def send_risk_alert(self, assessment: RiskAssessment, company_name: Optional[str] = None) -> bool:
        """
        Post a risk alert to Slack with retry logic.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1)
        - Retries on 5xx errors and network failures, 4xx fails immediately
        - Tracks latency histogram and failure counter

        Returns:
            True when delivered, False when no webhook is configured
        """
        if not self.webhook_url:
            logger.warning(
                "Slack webhook not configured, alert skipped",
                extra={"company_id": assessment.company_id, "risk_level": assessment.risk_level.value},
            )
            return False

        payload = self.build_message(assessment, company_name)
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with alert_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                    return True

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    alert_failure_counter.inc()

                    retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500
                    if not retryable or attempt >= self.max_retries:
                        logger.error(
                            f"Slack alert failed after {attempt} attempt(s): {e}",
                            extra={"company_id": assessment.company_id},
                        )
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
