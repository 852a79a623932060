"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Add app to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("PAYMENTS_API_BASE_URL", "http://payments.test/api")

from app.domain.models.transaction import (  # noqa: E402
    BatchSubmissionResult,
    CurrentUser,
    Transaction,
    TransactionStatus,
)

# =============================================================================
# Mock Users (as returned by the auth backend)
# =============================================================================

MOCK_EMPLOYEE = {
    "_id": "emp-001",
    "full_name": "Test Employee",
    "userType": "employee",
}

MOCK_CUSTOMER = {
    "_id": "cust-001",
    "username": "test-customer",
    "userType": "customer",
}


def make_transaction(
    transaction_id: str = "1",
    status: str | TransactionStatus = TransactionStatus.PENDING,
    beneficiary_name: str = "Jane Doe",
    created_at: datetime | None = None,
    amount: str = "1500.00",
    **overrides,
) -> Transaction:
    """Build a Transaction with sensible defaults."""
    data = {
        "id": transaction_id,
        "beneficiary_name": beneficiary_name,
        "beneficiary_account_number": "GB29NWBK60161331926819",
        "amount": Decimal(amount),
        "currency": "GBP",
        "bank_name": "NatWest",
        "bank_country": "GB",
        "swift_code": "NWBKGB2L",
        "status": status,
        "created_at": created_at or datetime(2025, 10, 3, 9, 30, tzinfo=UTC),
    }
    data.update(overrides)
    return Transaction.model_validate(data)


def make_gateway(transactions: list[Transaction] | None = None) -> AsyncMock:
    """Mock payments gateway returning ``transactions`` from every full fetch."""
    gateway = AsyncMock()
    gateway.fetch_all_transactions = AsyncMock(return_value=list(transactions or []))
    gateway.fetch_transaction_by_id = AsyncMock()
    gateway.approve_transaction = AsyncMock(return_value=None)
    gateway.reject_transaction = AsyncMock(return_value=None)
    gateway.submit_batch = AsyncMock(
        side_effect=lambda ids: BatchSubmissionResult(submitted_count=len(ids))
    )
    gateway.verify_token = AsyncMock(return_value=CurrentUser.model_validate(MOCK_EMPLOYEE))
    gateway.aclose = AsyncMock()
    gateway.with_token = lambda token: gateway
    return gateway


@pytest.fixture
def mixed_transactions() -> list[Transaction]:
    """One pending, one verified and one rejected transaction."""
    return [
        make_transaction("1", TransactionStatus.PENDING, "Alice Martin"),
        make_transaction("2", TransactionStatus.VERIFIED, "Bob Okafor"),
        make_transaction("3", TransactionStatus.REJECTED, "Carla Alvarez"),
    ]


@pytest.fixture
def employee_user() -> CurrentUser:
    """Signed-in employee."""
    return CurrentUser.model_validate(MOCK_EMPLOYEE)


@pytest.fixture
def customer_user() -> CurrentUser:
    """Signed-in customer (not allowed into the review workflow)."""
    return CurrentUser.model_validate(MOCK_CUSTOMER)


@pytest.fixture
def mock_gateway(mixed_transactions) -> AsyncMock:
    """Mock payments gateway seeded with the mixed transactions."""
    return make_gateway(mixed_transactions)
