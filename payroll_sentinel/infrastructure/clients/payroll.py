"""Payroll API HTTP client for upcoming payroll runs"""

from typing import List

import httpx

from payroll_sentinel.config import settings
from payroll_sentinel.domain.exceptions import PayrollAPIError
from payroll_sentinel.domain.models import Obligation


class PayrollClient:
    """Client for the external payroll processing API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.payroll_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_upcoming_obligations(self, company_id: str) -> List[Obligation]:
        """
        Fetch scheduled payroll runs as obligations, soonest first.

        The risk engine treats the first obligation as the next payroll,
        so runs are sorted here rather than trusting upstream order.

        Raises:
            PayrollAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/payroll/runs",
                    params={"company_id": company_id},
                )
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise PayrollAPIError(f"Unexpected payroll response: expected an object, got {type(data).__name__}")

                obligations = [
                    Obligation(
                        amount=run["amount"],
                        date=run["date"],
                        description=run.get("description"),
                        employee_count=run.get("employee_count"),
                    )
                    for run in data.get("payroll_runs", [])
                ]
                return sorted(obligations, key=lambda o: o.date)

            except httpx.TimeoutException as e:
                raise PayrollAPIError(f"Payroll API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PayrollAPIError(f"Payroll API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PayrollAPIError(f"Payroll API unreachable: {e}") from e
            except (KeyError, ArithmeticError, ValueError, TypeError, AttributeError) as e:
                raise PayrollAPIError(f"Invalid payroll data: {e}") from e
