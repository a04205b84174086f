"""Bank API HTTP client for account balance and expected inflows"""

from decimal import Decimal
from typing import Any, Dict, List

import httpx

from payroll_sentinel.config import settings
from payroll_sentinel.domain.exceptions import BankAPIError
from payroll_sentinel.domain.models import Inflow, to_decimal


class BankClient:
    """Client for the external banking aggregation API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.bank_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get(self, path: str, company_id: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}{path}", params={"company_id": company_id})
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise BankAPIError(f"Bank API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise BankAPIError(f"Bank API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise BankAPIError(f"Bank API unreachable: {e}") from e
            except ValueError as e:
                raise BankAPIError(f"Invalid JSON from bank: {e}") from e

        if not isinstance(data, dict):
            raise BankAPIError(f"Unexpected bank response: expected an object, got {type(data).__name__}")
        return data

    async def get_balance(self, company_id: str) -> Decimal:
        """
        Fetch the available balance on the company's operating account.

        Raises:
            BankAPIError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get("/bank/balance", company_id)
        try:
            return to_decimal(data["available_balance"])
        except (KeyError, ArithmeticError, TypeError) as e:
            raise BankAPIError(f"Invalid balance data from bank: {e}") from e

    async def get_expected_inflows(self, company_id: str) -> List[Inflow]:
        """
        Fetch expected incoming payments (receivables, scheduled transfers).

        Raises:
            BankAPIError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get("/bank/inflows", company_id)
        try:
            return [
                Inflow(
                    amount=item["amount"],
                    date=item["date"],
                    description=item.get("description"),
                    confidence=item.get("confidence"),
                )
                for item in data.get("inflows", [])
            ]
        except (KeyError, ArithmeticError, ValueError, TypeError, AttributeError) as e:
            raise BankAPIError(f"Invalid inflow data from bank: {e}") from e
