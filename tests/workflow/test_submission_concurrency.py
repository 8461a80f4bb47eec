"""Concurrency tests: optimistic retries, bounded conflicts, independent entities."""

import asyncio

import pytest

from fraud_surveillance.config.settings import Settings
from fraud_surveillance.data_management.entity_store import EntityStore
from fraud_surveillance.data_management.schemas import AlertSpec, AnnouncementStatus
from fraud_surveillance.exceptions import ConflictError, VersionConflictError
from fraud_surveillance.workflow.verification_controller import VerificationController


class InterleavingStore(EntityStore):
    """Yields to the event loop after every read so concurrent cycles overlap."""

    def __init__(self) -> None:
        super().__init__()
        self.conflicts = 0

    async def load(self, entity_id):
        entity = await super().load(entity_id)
        await asyncio.sleep(0)
        return entity

    async def save(self, entity):
        try:
            return await super().save(entity)
        except VersionConflictError:
            self.conflicts += 1
            raise


class AlwaysConflictingStore(EntityStore):
    """Every save loses the race."""

    def __init__(self) -> None:
        super().__init__()
        self.save_calls = 0

    async def save(self, entity):
        self.save_calls += 1
        raise VersionConflictError(entity.entity_id, entity.revision, entity.revision + 1)


@pytest.fixture
def interleaving_store() -> InterleavingStore:
    return InterleavingStore()


@pytest.fixture
def interleaving_controller(interleaving_store, clock, fast_settings) -> VerificationController:
    return VerificationController(interleaving_store, clock=clock, settings=fast_settings)


class TestConcurrentSubmissions:
    @pytest.mark.asyncio
    async def test_second_writer_retries_and_merges(
        self, interleaving_controller: VerificationController, interleaving_store: InterleavingStore
    ) -> None:
        announcement = await interleaving_controller.create_announcement(
            company_id="ACME", title="Record orders"
        )
        entity_id = announcement.announcement_id

        first, second = await asyncio.gather(
            interleaving_controller.submit_evidence(
                entity_id,
                {"counter_party": {"status": "confirmed"}},
                "counter-party-verification",
            ),
            interleaving_controller.submit_evidence(
                entity_id, {"content": {"precise": True}}, "content-analysis"
            ),
        )

        assert interleaving_store.conflicts >= 1
        assert {first.revision, second.revision} == {1, 2}

        final = await interleaving_store.load(entity_id)
        assert final.evidence.counter_party is not None
        assert final.evidence.content is not None
        assert final.credibility_score == 50 + 20 + 10
        assert final.verification_status == AnnouncementStatus.VERIFIED
        assert len(final.verification_history) == 2

    @pytest.mark.asyncio
    async def test_alert_survives_concurrent_submission(
        self, interleaving_controller: VerificationController, interleaving_store: InterleavingStore
    ) -> None:
        announcement = await interleaving_controller.create_announcement(
            company_id="ACME", title="Deal with Globex"
        )
        entity_id = announcement.announcement_id
        await interleaving_controller.submit_evidence(
            entity_id,
            {"counter_party": {"status": "contradicted"}},
            "counter-party-verification",
        )

        await asyncio.gather(
            interleaving_controller.submit_evidence(
                entity_id, {}, "manual-review", notes="Reviewed, still fraudulent"
            ),
            interleaving_controller.send_alert(
                entity_id,
                AlertSpec(recipients=["newsroom@example.com"], message="Deal denied"),
            ),
        )

        final = await interleaving_store.load(entity_id)
        assert len(final.alerts) == 1
        assert len(final.verification_history) == 2

    @pytest.mark.asyncio
    async def test_different_entities_are_independent(
        self, interleaving_controller: VerificationController, interleaving_store: InterleavingStore
    ) -> None:
        first = await interleaving_controller.create_announcement(company_id="A", title="One")
        second = await interleaving_controller.create_announcement(company_id="B", title="Two")

        await asyncio.gather(
            interleaving_controller.submit_evidence(first.announcement_id, {}, "manual-review"),
            interleaving_controller.submit_evidence(second.announcement_id, {}, "manual-review"),
        )

        assert interleaving_store.conflicts == 0


class TestBoundedRetries:
    @pytest.mark.asyncio
    async def test_conflict_after_retry_budget(self, clock) -> None:
        store = AlwaysConflictingStore()
        settings = Settings(
            submission_max_attempts=3,
            submission_retry_multiplier=0.0,
            submission_retry_max_wait=0.0,
        )
        controller = VerificationController(store, clock=clock, settings=settings)
        announcement = await controller.create_announcement(company_id="ACME", title="Deal")

        with pytest.raises(ConflictError) as exc_info:
            await controller.submit_evidence(
                announcement.announcement_id, {}, "manual-review"
            )

        assert exc_info.value.attempts == 3
        assert store.save_calls == 3
        assert isinstance(exc_info.value.__cause__, VersionConflictError)
