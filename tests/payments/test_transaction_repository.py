from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from application.dtos.payments import CardToken, Invoice
from application.services.payment_service import TransactionService
from domain.payment.entity import TransactionStatus
from domain.payment.service import TransactionAlreadyExistsException
from infrastructure.models import Base
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


pytest.importorskip("aiosqlite")


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()


@pytest.mark.asyncio
async def test_transaction_lifecycle_is_persisted(session_factory, order):
    service = TransactionService(uow_factory=lambda: SQLAlchemyUnitOfWork(session_factory=session_factory))

    tx = await service.create_transaction(order, order.payment, {"provider": "platon"})
    assert tx.id is not None

    await service.process(Invoice(
        provider="platon",
        provider_ref="gw-9",
        transaction_id=tx.transaction_id,
        status=TransactionStatus.SUCCESSFUL,
        amount=Decimal("10.00"),
        card=CardToken(card="411111xxxxxx1111", token="tok", data={"rc_id": "rc-9"}),
    ))

    async with SQLAlchemyUnitOfWork(session_factory=session_factory, readonly=True) as uow:
        stored = await uow.transaction_repository.get_by_transaction_id(tx.transaction_id)

    assert stored.status == TransactionStatus.SUCCESSFUL
    assert stored.provider_ref == "gw-9"
    assert stored.amount == Decimal("10.00")
    assert stored.card_token["token"] == "tok"
    assert stored.paid_at is not None


@pytest.mark.asyncio
async def test_duplicate_transaction_id_conflicts(session_factory, order, monkeypatch):
    import application.services.payment_service as svc

    monkeypatch.setattr(svc, "new_transaction_id", lambda: "fixed")
    service = TransactionService(uow_factory=lambda: SQLAlchemyUnitOfWork(session_factory=session_factory))

    await service.create_transaction(order, order.payment, {"provider": "platon"})
    with pytest.raises(TransactionAlreadyExistsException):
        await service.create_transaction(order, order.payment, {"provider": "platon"})
