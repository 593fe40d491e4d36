# services/portone.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from flask import current_app

from domain.errors import ConfigurationError, GatewayError


@dataclass(frozen=True)
class GatewayResponse:
    status_code: int
    data: Dict[str, Any]

    @property
    def payment_id(self) -> Optional[str]:
        return self.data.get("id")

    @property
    def payment_status(self) -> Optional[str]:
        return self.data.get("status")


class PortOneClient:
    """
    PortOne v2 REST 클라이언트 (빌링키 결제 / 결제 취소).
    - 인증: Authorization: PortOne <API_SECRET>
    - 재시도 없음. 결제/취소는 멱등키 협의 없이 재전송하면 이중 처리 위험.
    """

    def __init__(self, api_base: str, api_secret: str, *, timeout: float = 10,
                 currency: str = "KRW", session: Optional[requests.Session] = None):
        self.api_base = (api_base or "").rstrip("/")
        self.api_secret = (api_secret or "").strip()
        self.timeout = timeout
        self.currency = currency
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg) -> "PortOneClient":
        return cls(
            cfg.get("PORTONE_API_BASE", "https://api.portone.io"),
            cfg.get("PORTONE_API_SECRET", ""),
            timeout=cfg.get("PORTONE_TIMEOUT_SECONDS", 10),
            currency=cfg.get("PORTONE_CURRENCY", "KRW"),
        )

    def _headers(self) -> dict:
        if not self.api_secret:
            raise ConfigurationError("PORTONE_API_SECRET이 설정되지 않았습니다.")
        return {
            "Authorization": f"PortOne {self.api_secret}",
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: Dict[str, Any], *, error_message: str,
              use_gateway_message: bool = True) -> GatewayResponse:
        headers = self._headers()
        url = f"{self.api_base}{path}"

        try:
            resp = self.session.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            current_app.logger.error("[portone] POST %s transport error: %r", path, e)
            raise GatewayError(error_message, status_code=502, payload={"reason": str(e)}) from e
        # 실패 시에도 JSON 바디가 오는 경우가 많아 같이 남김
        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}
        if not isinstance(data, dict):
            data = {"raw": data}

        current_app.logger.info("[portone] POST %s status=%s", path, resp.status_code)

        if not resp.ok:
            current_app.logger.error("[portone] POST %s failed: %s", path, data)
            raise GatewayError(
                (use_gateway_message and data.get("message")) or error_message,
                status_code=resp.status_code,
                payload=data,
            )
        return GatewayResponse(status_code=resp.status_code, data=data)

    # ---- 빌링키 결제 ----
    def charge_billing_key(self, payment_id: str, *, billing_key: str, order_name: str,
                           customer_id: str, amount: int, custom_data=None) -> GatewayResponse:
        # POST /payments/{paymentId}/billing-key
        return self._post(
            f"/payments/{quote(payment_id, safe='')}/billing-key",
            {
                "billingKey": billing_key,
                "orderName": order_name,
                "customer": {"id": customer_id},
                "amount": {"total": int(amount)},
                "customData": custom_data,
                "currency": self.currency,
            },
            error_message="결제 처리 중 오류가 발생했습니다.",
        )

    # ---- 결제 취소 ----
    def cancel_payment(self, transaction_key: str, *, reason: str) -> GatewayResponse:
        # POST /payments/{transactionKey}/cancel
        return self._post(
            f"/payments/{quote(transaction_key, safe='')}/cancel",
            {"reason": reason},
            error_message="결제 취소 처리 중 오류가 발생했습니다.",
            use_gateway_message=False,
        )
