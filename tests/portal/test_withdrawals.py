from decimal import Decimal

import pytest

from transnet.models.records import WithdrawalSource, WithdrawalStatus
from transnet.portal.access import AuthContext
from transnet.portal.errors import (
    NotFoundError,
    OrganizationRequiredError,
    ValidationFailed,
    parse_form,
)
from transnet.portal.withdrawals import (
    RequestMetadata,
    WithdrawalRecorder,
    WithdrawalRequest,
)


@pytest.fixture
def recorder(store):
    return WithdrawalRecorder(store, history_limit=2)


def request(**overrides) -> WithdrawalRequest:
    values = {
        "exchange": "binance",
        "coin": "USDT",
        "network": "TRX",
        "address": "TAddress",
        "amount": "12.50",
    }
    values.update(overrides)
    return WithdrawalRequest(**values)


@pytest.mark.asyncio
async def test_submit_records_pending_row_and_activity(recorder, store, context):
    metadata = RequestMetadata(ip_address="203.0.113.9", user_agent="pytest")

    record = await recorder.submit(context, request(memo="  "), metadata)

    assert record.status == WithdrawalStatus.PENDING
    assert record.source == WithdrawalSource.APP
    assert record.amount == Decimal("12.50")
    assert record.tag is None
    assert record.organization_id == context.organization.id
    assert record.initiated_by == context.user.id
    assert store.withdrawals[record.id] == record

    (entry,) = store.activity
    assert entry.action == "withdrawal"
    assert entry.entity == "withdraw_history"
    assert entry.entity_id == record.id
    assert entry.details["amount"] == "12.50"
    assert entry.ip_address == "203.0.113.9"
    assert entry.user_agent == "pytest"


@pytest.mark.asyncio
async def test_failed_write_leaves_no_partial_state(recorder, store, context):
    store.fail_next = RuntimeError("connection lost")

    with pytest.raises(RuntimeError):
        await recorder.submit(context, request(), RequestMetadata())

    assert store.withdrawals == {}
    assert store.activity == []


@pytest.mark.asyncio
async def test_submit_requires_organization(recorder, owner):
    with pytest.raises(OrganizationRequiredError):
        await recorder.submit(AuthContext(user=owner), request(), RequestMetadata())


@pytest.mark.asyncio
async def test_history_is_newest_first_and_limited(recorder, context):
    for amount in ("1", "2", "3"):
        await recorder.submit(context, request(amount=amount), RequestMetadata())

    history = await recorder.history(context)

    assert len(history) == 2
    assert history[0].created_at >= history[1].created_at


@pytest.mark.asyncio
async def test_get_is_scoped_to_organization(recorder, store, context):
    record = await recorder.submit(context, request(), RequestMetadata())
    store.withdrawals[record.id] = record.model_copy(update={"organization_id": "other"})

    with pytest.raises(NotFoundError, match="Transaction not found"):
        await recorder.get(context, record.id)


@pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "NaN"])
def test_amount_must_be_positive(amount):
    with pytest.raises(ValidationFailed) as exc_info:
        parse_form(
            WithdrawalRequest,
            {
                "exchange": "binance",
                "coin": "USDT",
                "network": "TRX",
                "address": "T",
                "amount": amount,
            },
        )
    assert exc_info.value.errors == {"amount": "Amount must be positive"}


def test_missing_fields_are_named():
    with pytest.raises(ValidationFailed) as exc_info:
        parse_form(
            WithdrawalRequest,
            {"exchange": "", "coin": "USDT", "network": " ", "address": "", "amount": "1"},
        )
    assert exc_info.value.errors == {
        "exchange": "Exchange is required",
        "network": "Network is required",
        "address": "Address is required",
    }


def test_metadata_prefers_cloudflare_header():
    metadata = RequestMetadata.from_headers(
        {
            "cf-connecting-ip": "198.51.100.1",
            "x-forwarded-for": "10.0.0.1",
            "user-agent": "browser",
        }
    )
    assert metadata.ip_address == "198.51.100.1"
    assert metadata.user_agent == "browser"


def test_metadata_falls_back_to_forwarded_for_then_unknown():
    assert RequestMetadata.from_headers({"x-forwarded-for": "10.0.0.1"}).ip_address == "10.0.0.1"
    assert RequestMetadata.from_headers({}) == RequestMetadata(
        ip_address="unknown", user_agent="unknown"
    )
