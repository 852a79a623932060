"""
Client for the payments backend.

``PaymentsGateway`` is the logical contract the review workflow depends on;
``HttpPaymentsGateway`` implements it over HTTP. Every backend or transport
failure is raised as ``RequestFailedError`` (``NotFoundError`` for a 404 on
a single-transaction fetch).
"""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import PaymentsBackendConfig
from app.core.errors import NotFoundError, RequestFailedError, UnauthorizedError
from app.domain.models.transaction import BatchSubmissionResult, CurrentUser, Transaction

logger = logging.getLogger(__name__)


class PaymentsGateway(Protocol):
    """Operations the review workflow needs from the payments backend."""

    async def fetch_all_transactions(self) -> list[Transaction]: ...

    async def fetch_transaction_by_id(self, transaction_id: str) -> Transaction: ...

    async def approve_transaction(self, transaction_id: str, note: str = "") -> None: ...

    async def reject_transaction(self, transaction_id: str, reason: str) -> None: ...

    async def submit_batch(self, transaction_ids: list[str]) -> BatchSubmissionResult: ...

    async def verify_token(self, token: str) -> CurrentUser: ...


def _unwrap(payload: Any, key: str | None = None) -> Any:
    """Accept both bare and ``{"data": ...}`` enveloped responses."""
    if isinstance(payload, dict):
        if key is not None and key in payload:
            return payload[key]
        data = payload.get("data")
        if data is not None:
            if key is not None and isinstance(data, dict) and key in data:
                return data[key]
            return data
    return payload


def _decode(response: httpx.Response, failure_message: str) -> Any:
    """Parse a JSON body; an empty body decodes to ``None``."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        logger.error(
            "Payments backend returned a non-JSON body",
            extra={"status_code": response.status_code, "error": str(e)},
        )
        raise RequestFailedError(failure_message) from e


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str):
            return message
    return None


class HttpPaymentsGateway:
    """``PaymentsGateway`` backed by an ``httpx.AsyncClient``.

    The bearer token of the signed-in employee is forwarded on every call.
    """

    def __init__(
        self,
        config: PaymentsBackendConfig,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.token = token
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
        )

    def with_token(self, token: str | None) -> "HttpPaymentsGateway":
        """Gateway sharing this connection pool but acting for another user."""
        return HttpPaymentsGateway(self.config, token=token, client=self._client)

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    def _headers(self, token: str | None = None) -> dict[str, str]:
        token = token or self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        failure_message: str,
        json: Any = None,
        token: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, json=json, headers=self._headers(token)
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Payments backend unreachable",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise RequestFailedError(failure_message) from e

        if response.is_error:
            server_message = _server_message(response)
            logger.warning(
                "Payments backend rejected request",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "server_message": server_message,
                },
            )
            if response.status_code == 404:
                raise NotFoundError(
                    server_message or "Transaction not found", details={"path": path}
                )
            raise RequestFailedError(
                failure_message,
                server_message=server_message,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse(model: Any, payload: Any, failure_message: str) -> Any:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            logger.error("Malformed payments backend response", extra={"error": str(e)})
            raise RequestFailedError(failure_message) from e

    async def fetch_all_transactions(self) -> list[Transaction]:
        message = "Failed to load transactions. Please try again later."
        response = await self._request(
            "GET", self.config.transactions_path, failure_message=message
        )
        items = _unwrap(_decode(response, message), "transactions") or []
        if not isinstance(items, list):
            raise RequestFailedError(message)
        return [self._parse(Transaction, item, message) for item in items]

    async def fetch_transaction_by_id(self, transaction_id: str) -> Transaction:
        message = "Failed to load transaction details."
        response = await self._request(
            "GET",
            f"{self.config.transactions_path}/{transaction_id}",
            failure_message=message,
        )
        payload = _unwrap(_decode(response, message), "transaction")
        if not payload:
            raise NotFoundError("Transaction not found", details={"transaction_id": transaction_id})
        return self._parse(Transaction, payload, message)

    async def approve_transaction(self, transaction_id: str, note: str = "") -> None:
        await self._request(
            "PUT",
            f"{self.config.transactions_path}/{transaction_id}/verify",
            failure_message="Failed to approve transaction. Please try again.",
            json={"notes": note},
        )

    async def reject_transaction(self, transaction_id: str, reason: str) -> None:
        await self._request(
            "PUT",
            f"{self.config.transactions_path}/{transaction_id}/reject",
            failure_message="Failed to reject transaction. Please try again.",
            json={"reason": reason},
        )

    async def submit_batch(self, transaction_ids: list[str]) -> BatchSubmissionResult:
        message = "Failed to submit transactions for settlement. Please try again."
        response = await self._request(
            "POST",
            self.config.submit_path,
            failure_message=message,
            json={"transactionIds": transaction_ids},
        )
        # The batch is accepted at this point; an unreadable acknowledgement
        # falls back to the size of the request.
        try:
            payload = _unwrap(_decode(response, message))
            if isinstance(payload, dict) and (
                "submitted_count" in payload or "submittedCount" in payload
            ):
                return self._parse(BatchSubmissionResult, payload, message)
        except RequestFailedError:
            logger.warning(
                "Unreadable settlement batch acknowledgement",
                extra={"transaction_ids": transaction_ids},
            )
        return BatchSubmissionResult(submitted_count=len(transaction_ids))

    async def verify_token(self, token: str) -> CurrentUser:
        try:
            response = await self._request(
                "GET",
                self.config.verify_token_path,
                failure_message="Token verification failed",
                token=token,
            )
        except (RequestFailedError, NotFoundError) as e:
            raise UnauthorizedError("Invalid or expired token") from e
        try:
            payload = _unwrap(_decode(response, "Token verification failed"), "user")
            return CurrentUser.model_validate(payload)
        except (RequestFailedError, PydanticValidationError) as e:
            raise UnauthorizedError("Invalid or expired token") from e
