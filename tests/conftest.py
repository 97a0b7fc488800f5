from typing import AsyncIterator

import httpx
import pytest

from services.portal.app import create_app
from tests.helpers import (
    PASSWORD,
    FakeExchange,
    FakeStore,
    build_config,
    build_registry,
)
from transnet.models.coins import Balance, Coin
from transnet.models.records import (
    Membership,
    MembershipRole,
    Organization,
    User,
)
from transnet.portal.access import AuthContext
from transnet.portal.security import TokenService, hash_password


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def binance() -> FakeExchange:
    return FakeExchange(
        name="binance",
        coins=[Coin(symbol="USDT", name="TetherUS", networks=["TRX"], withdraw_enabled=True)],
        balances=[Balance(coin="USDT", free="100", locked="5")],
    )


@pytest.fixture
def mexc() -> FakeExchange:
    return FakeExchange(
        name="mexc",
        coins=[Coin(symbol="BTC", name="Bitcoin", networks=["BTC"], withdraw_enabled=True)],
        balances=[Balance(coin="BTC", free="0.5")],
    )


@pytest.fixture
def registry(binance, mexc):
    return build_registry(binance, mexc)


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def owner(store) -> User:
    user = User(
        username="alice",
        email="alice@example.com",
        password_hash=hash_password(PASSWORD),
    )
    store.users[user.id] = user
    return user


@pytest.fixture
def organization(store, owner) -> Organization:
    org = Organization(name="Treasury", slug="treasury", owner_id=owner.id)
    membership = Membership(
        user_id=owner.id, organization_id=org.id, role=MembershipRole.OWNER
    )
    store.organizations[org.id] = org
    store.memberships[membership.id] = membership
    store.users[owner.id] = owner.model_copy(update={"current_organization_id": org.id})
    return org


@pytest.fixture
def context(store, owner, organization) -> AuthContext:
    user = store.users[owner.id]
    membership = next(iter(store.memberships.values()))
    return AuthContext(user=user, organization=organization, membership=membership)


@pytest.fixture
def app(config, store, registry):
    return create_app(config=config, store=store, registry=registry)


@pytest.fixture
def token(config, owner) -> str:
    return TokenService(config.security).create_session_token(owner.id)


@pytest.fixture
async def anonymous_client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def client(app, token, organization) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={"auth_token": token},
        headers={"HX-Request": "true"},
    ) as client:
        yield client
