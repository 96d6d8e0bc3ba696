from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.exceptions import DeliveryPersistenceError
from app.repositories.delivery_record_repository import DeliveryRecordRepository
from app.services.batch_committer import BatchCommitter
from conftest import make_record
from db.base import Base
from db.models import DeliveryData

pytestmark = pytest.mark.anyio


def _memory_engine() -> Engine:
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def session_factory() -> Iterator[sessionmaker[Session]]:
    engine = _memory_engine()
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, expire_on_commit=False)
    finally:
        engine.dispose()


@pytest.fixture
def repository(session_factory: sessionmaker[Session]) -> DeliveryRecordRepository:
    return DeliveryRecordRepository(session_factory=session_factory)


def _stored_names(session_factory: sessionmaker[Session]) -> list[str]:
    with session_factory() as session:
        return list(session.scalars(select(DeliveryData.pessoa_entregadora).order_by(DeliveryData.id)))


async def test_insert_many_persists_every_record(
    repository: DeliveryRecordRepository,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = await repository.insert_many([make_record(1), make_record(2)])

    assert outcome.ok
    assert outcome.inserted == 2
    assert _stored_names(session_factory) == ["Entregador 1", "Entregador 2"]


async def test_insert_one_persists_typed_columns(
    repository: DeliveryRecordRepository,
    session_factory: sessionmaker[Session],
) -> None:
    record = make_record(7, duracao_do_periodo="8:30:00", numero_de_corridas_completadas=5)

    outcome = await repository.insert_one(record)

    assert outcome.ok
    with session_factory() as session:
        stored = session.scalars(select(DeliveryData)).one()
    assert stored.data_do_periodo.isoformat() == "2024-03-15"
    assert stored.duracao_do_periodo == "8:30:00"
    assert stored.numero_de_corridas_completadas == 5


async def test_bad_record_fails_whole_call_without_raising(
    repository: DeliveryRecordRepository,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = await repository.insert_many([make_record(1), make_record(2, pessoa_entregadora=None)])

    assert not outcome.ok
    assert outcome.inserted == 0
    assert outcome.error.startswith("IntegrityError:")
    assert _stored_names(session_factory) == []


async def test_unparseable_date_is_an_error_outcome(repository: DeliveryRecordRepository) -> None:
    outcome = await repository.insert_one(make_record(1, data_do_periodo="2024-13-01"))

    assert not outcome.ok
    assert outcome.error.startswith("ValueError:")


async def test_stats_and_clear(repository: DeliveryRecordRepository) -> None:
    await repository.insert_many(
        [
            make_record(1, numero_de_corridas_ofertadas=10, numero_de_corridas_completadas=7),
            make_record(2, numero_de_corridas_ofertadas=5, numero_de_corridas_rejeitadas=1),
        ]
    )

    stats = await repository.get_stats()
    assert stats.total_records == 2
    assert stats.total_ofertadas == 15
    assert stats.total_aceitas == 16
    assert stats.total_rejeitadas == 1
    assert stats.total_completadas == 7

    assert await repository.clear_all() == 2
    assert (await repository.get_stats()).total_records == 0
    assert await repository.clear_all() == 0


async def test_empty_table_stats_are_zero(repository: DeliveryRecordRepository) -> None:
    stats = await repository.get_stats()

    assert stats.total_records == 0
    assert stats.total_aceitas == 0


async def test_check_table_reports_existing_table(repository: DeliveryRecordRepository) -> None:
    status = await repository.check_table()

    assert status.exists
    assert status.error is None


async def test_check_table_reports_missing_table() -> None:
    engine = _memory_engine()
    repository = DeliveryRecordRepository(session_factory=sessionmaker(bind=engine))

    status = await repository.check_table()

    assert not status.exists
    assert "delivery_data" in (status.error or "")
    engine.dispose()


async def test_stats_and_clear_without_table_raise_persistence_error() -> None:
    engine = _memory_engine()
    repository = DeliveryRecordRepository(session_factory=sessionmaker(bind=engine))

    with pytest.raises(DeliveryPersistenceError):
        await repository.get_stats()
    with pytest.raises(DeliveryPersistenceError):
        await repository.clear_all()
    engine.dispose()


async def test_committer_isolates_failing_record_in_database(
    repository: DeliveryRecordRepository,
    session_factory: sessionmaker[Session],
) -> None:
    records = [make_record(index) for index in range(5)]
    records[3] = make_record(3, pessoa_entregadora=None)
    committer = BatchCommitter(repository, batch_size=2, pause_seconds=0)

    result = await committer.commit_in_batches(records)

    assert result.success_count == 4
    assert result.error_count == 1
    assert len(result.error_details) == 1
    assert result.error_details[0].startswith("Batch 2 (records 2-3): 1 succeeded, 1 failed [record 3:")
    assert _stored_names(session_factory) == [
        "Entregador 0",
        "Entregador 1",
        "Entregador 2",
        "Entregador 4",
    ]
