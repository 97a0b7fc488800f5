import pytest

from transnet.portal.errors import NotFoundError, ValidationFailed, parse_form
from transnet.portal.wallets import WalletForm, WalletService


@pytest.fixture
def service(store):
    return WalletService(store)


def wallet_form(**overrides) -> WalletForm:
    values = {
        "label": "Cold storage",
        "coin": "USDT",
        "network": "TRX",
        "address": "TAddress",
        "exchange": "binance",
        "description": "",
    }
    values.update(overrides)
    return WalletForm(**values)


@pytest.mark.asyncio
async def test_create_and_list(service, context):
    first = await service.create(context, wallet_form())
    second = await service.create(context, wallet_form(label="Hot"))

    wallets = await service.list_wallets(context)

    assert {w.id for w in wallets} == {first.id, second.id}
    assert first.description is None
    assert first.created_by == context.user.id
    assert first.is_shared is True


@pytest.mark.asyncio
async def test_wallets_of_other_organizations_are_invisible(service, store, context):
    saved = await service.create(context, wallet_form())
    store.wallets[saved.id] = saved.model_copy(update={"organization_id": "other"})

    assert await service.list_wallets(context) == []
    with pytest.raises(NotFoundError):
        await service.get(context, saved.id)
    with pytest.raises(NotFoundError):
        await service.delete(context, saved.id)


@pytest.mark.asyncio
async def test_delete(service, store, context):
    saved = await service.create(context, wallet_form())

    await service.delete(context, saved.id)

    assert store.wallets == {}


def test_form_requires_fields():
    with pytest.raises(ValidationFailed) as exc_info:
        parse_form(
            WalletForm,
            {"label": "", "coin": "USDT", "network": "TRX", "address": " ", "exchange": "mexc"},
        )
    assert exc_info.value.errors == {
        "label": "Label is required",
        "address": "Address is required",
    }
