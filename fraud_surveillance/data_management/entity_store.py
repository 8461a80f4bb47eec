"""Entity storage with optimistic concurrency and optional JSON persistence.

Reference implementation of the persistence collaborator the workflow
controller depends on. Any document store can stand in for it as long as it
honours the EntityRepository protocol:

- ``load`` returns an independent copy (records are stored as JSON dicts)
- ``save`` is a compare-and-swap on ``revision``: a save built from a stale
  read raises VersionConflictError instead of silently overwriting
- ``save`` refuses any history that does not extend the stored history
- ``append_alert`` bumps ``revision`` so a concurrent submission re-reads the
  alert list rather than dropping it

Data structure:
{
    "announcement": {announcement_id: Announcement dict, ...},
    "social_media_tip": {tip_id: SocialMediaTip dict, ...},
    "market_activity": {activity_id: MarketActivity dict, ...},
}

Usage:
    store = EntityStore()
    await store.create(Announcement(company_id="ACME", title="Record orders"))
    announcement = await store.load("ann-...")
    saved = await store.save(updated_announcement)
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from fraud_surveillance.config.logging import get_logger
from fraud_surveillance.data_management.schemas import (
    MODEL_BY_KIND,
    AlertRecord,
    Announcement,
    Entity,
    EntityKind,
    EvidenceLedger,
)
from fraud_surveillance.exceptions import (
    EntityNotFoundError,
    InvalidSubmissionError,
    VersionConflictError,
)


class EntityRepository(Protocol):
    """Persistence interface consumed by the VerificationController."""

    async def load(self, entity_id: str) -> Optional[Entity]: ...

    async def create(self, entity: Entity) -> Entity: ...

    async def save(self, entity: Entity) -> Entity: ...

    async def append_alert(
        self, entity_id: str, record: AlertRecord, expected_revision: int
    ) -> Announcement: ...


class EntityStore:
    """
    In-memory entity store keyed by entity kind and id.

    Features:
    - O(1) lookup by entity id across all kinds
    - Revision-checked saves (compare-and-swap)
    - Append-only history enforcement on save
    - Status / score queries used by dashboards and batch jobs
    - Optional JSON persistence for beta
    - Thread-safe operations with asyncio locks
    """

    def __init__(self, persistence_path: Optional[str] = None):
        """
        Initialize entity store.

        Args:
            persistence_path: Optional path to JSON file for persistence.
                            If None, storage is memory-only.
        """
        self._storage: Dict[str, Dict[str, Dict[str, Any]]] = {
            kind.value: {} for kind in EntityKind
        }
        self._kind_index: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        self.persistence_path = Path(persistence_path) if persistence_path else None
        self.logger = get_logger("EntityStore")

        if self.persistence_path and self.persistence_path.exists():
            self._load_from_file()

        self.logger.info(
            "EntityStore initialized",
            persistence_enabled=self.persistence_path is not None,
        )

    @staticmethod
    def _hydrate(kind: str, record: Dict[str, Any]) -> Entity:
        return MODEL_BY_KIND[EntityKind(kind)].model_validate(record)

    async def create(self, entity: Entity) -> Entity:
        """
        Store a new entity at revision 0.

        Args:
            entity: Announcement, SocialMediaTip or MarketActivity

        Returns:
            Stored copy of the entity

        Raises:
            InvalidSubmissionError: If the id is already taken
        """
        async with self._lock:
            entity_id = entity.entity_id
            if entity_id in self._kind_index:
                raise InvalidSubmissionError(f"entity already exists: {entity_id}")

            record = entity.model_dump(mode="json")
            record["revision"] = 0
            self._storage[entity.kind][entity_id] = record
            self._kind_index[entity_id] = entity.kind

            if self.persistence_path:
                self._save_to_file()

            self.logger.debug("Entity created", entity_id=entity_id, kind=entity.kind)
            return self._hydrate(entity.kind, record)

    async def load(self, entity_id: str) -> Optional[Entity]:
        """
        Load an independent copy of an entity.

        Args:
            entity_id: Announcement, tip or activity id

        Returns:
            Entity model if found, None otherwise
        """
        async with self._lock:
            kind = self._kind_index.get(entity_id)
            if kind is None:
                return None
            return self._hydrate(kind, self._storage[kind][entity_id])

    async def save(self, entity: Entity) -> Entity:
        """
        Compare-and-swap save.

        The entity's ``revision`` must equal the stored revision; the stored
        copy is written with ``revision + 1``.

        Args:
            entity: Updated entity built from a previous ``load``

        Returns:
            Stored copy carrying the new revision

        Raises:
            EntityNotFoundError: If the entity was never created
            VersionConflictError: If another writer saved first
            InvalidSubmissionError: If the evidence history was rewritten
        """
        async with self._lock:
            entity_id = entity.entity_id
            kind = self._kind_index.get(entity_id)
            if kind is None:
                raise EntityNotFoundError(entity_id, entity.kind)

            stored = self._storage[kind][entity_id]
            stored_revision = stored.get("revision", 0)
            if entity.revision != stored_revision:
                self.logger.debug(
                    "Revision conflict",
                    entity_id=entity_id,
                    expected=entity.revision,
                    stored=stored_revision,
                )
                raise VersionConflictError(entity_id, entity.revision, stored_revision)

            if "verification_history" in stored:
                previous = EvidenceLedger.model_validate(stored["verification_history"])
                if not entity.verification_history.extends(previous):
                    raise InvalidSubmissionError(
                        f"evidence history of {entity_id} may only be appended to"
                    )

            record = entity.model_dump(mode="json")
            record["revision"] = stored_revision + 1
            self._storage[kind][entity_id] = record

            if self.persistence_path:
                self._save_to_file()

            self.logger.debug(
                "Entity saved", entity_id=entity_id, revision=record["revision"]
            )
            return self._hydrate(kind, record)

    async def append_alert(
        self,
        entity_id: str,
        record: AlertRecord,
        expected_revision: int,
    ) -> Announcement:
        """
        Append an alert record to an announcement without touching other fields.

        Args:
            entity_id: Announcement id
            record: Alert to append
            expected_revision: Revision the caller checked preconditions against

        Returns:
            Stored announcement carrying the new revision

        Raises:
            EntityNotFoundError: If no announcement has this id
            VersionConflictError: If the announcement changed since it was read
        """
        async with self._lock:
            announcements = self._storage[EntityKind.ANNOUNCEMENT.value]
            stored = announcements.get(entity_id)
            if stored is None:
                raise EntityNotFoundError(entity_id, EntityKind.ANNOUNCEMENT.value)

            stored_revision = stored.get("revision", 0)
            if expected_revision != stored_revision:
                raise VersionConflictError(entity_id, expected_revision, stored_revision)

            updated = dict(stored)
            updated["alerts"] = list(stored.get("alerts", [])) + [
                record.model_dump(mode="json")
            ]
            updated["revision"] = stored_revision + 1
            announcements[entity_id] = updated

            if self.persistence_path:
                self._save_to_file()

            self.logger.info(
                "Alert appended", entity_id=entity_id, alert_id=record.alert_id
            )
            return self._hydrate(EntityKind.ANNOUNCEMENT.value, updated)

    async def list_by_status(self, kind: EntityKind, status: str) -> List[Entity]:
        """
        Get entities of one kind with the given status, newest first.

        Args:
            kind: Announcement or social-media tip
            status: Status value (e.g. "pending", "fraudulent", "flagged")
        """
        field = self._status_field(kind)
        status_value = getattr(status, "value", status)
        async with self._lock:
            matches = [
                self._hydrate(kind.value, record)
                for record in self._storage[kind.value].values()
                if record.get(field) == status_value
            ]
        return self._newest_first(matches)

    async def list_pending(self, kind: EntityKind, limit: int = 20) -> List[Entity]:
        """Get entities still awaiting their first evaluation, newest first."""
        pending = await self.list_by_status(kind, "pending")
        return pending[:limit]

    async def list_by_min_score(self, kind: EntityKind, minimum: int) -> List[Entity]:
        """Get scored entities whose score is at least ``minimum``, highest first."""
        field = self._score_field(kind)
        async with self._lock:
            matches = [
                self._hydrate(kind.value, record)
                for record in self._storage[kind.value].values()
                if record.get(field) is not None and record[field] >= minimum
            ]
        return sorted(matches, key=lambda e: e.score, reverse=True)

    async def get_stats(self, kind: EntityKind) -> Dict[str, Any]:
        """
        Get counts by status for one entity kind.

        Returns:
            Stats dict: {kind, total, status_counts}
        """
        async with self._lock:
            records = self._storage[kind.value]
            stats: Dict[str, Any] = {"kind": kind.value, "total": len(records)}
            if kind == EntityKind.MARKET_ACTIVITY:
                return stats

            field = self._status_field(kind)
            status_counts: Dict[str, int] = {}
            for record in records.values():
                status_value = record.get(field, "pending")
                status_counts[status_value] = status_counts.get(status_value, 0) + 1
            stats["status_counts"] = status_counts
            return stats

    @staticmethod
    def _status_field(kind: EntityKind) -> str:
        if kind == EntityKind.ANNOUNCEMENT:
            return "verification_status"
        if kind == EntityKind.SOCIAL_MEDIA_TIP:
            return "analysis_status"
        raise ValueError(f"{kind.value} entities have no status")

    @staticmethod
    def _score_field(kind: EntityKind) -> str:
        if kind == EntityKind.ANNOUNCEMENT:
            return "credibility_score"
        if kind == EntityKind.SOCIAL_MEDIA_TIP:
            return "suspicious_score"
        raise ValueError(f"{kind.value} entities have no score")

    @staticmethod
    def _newest_first(entities: List[Entity]) -> List[Entity]:
        return sorted(entities, key=lambda e: e.published_at, reverse=True)

    def _save_to_file(self) -> None:
        """Save to JSON file (synchronous)."""
        if not self.persistence_path:
            return
        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.persistence_path, "w") as f:
                json.dump(self._storage, f, indent=2, default=str)
        except OSError as e:
            self.logger.error(f"Failed to save to file: {e}")
            raise

    def _load_from_file(self) -> None:
        """Load storage from JSON file (synchronous)."""
        if not self.persistence_path or not self.persistence_path.exists():
            return

        with open(self.persistence_path, "r") as f:
            data = json.load(f)

        for kind in EntityKind:
            records = data.get(kind.value, {})
            self._storage[kind.value] = records
            for entity_id in records:
                self._kind_index[entity_id] = kind.value

        self.logger.info(
            f"Loaded from {self.persistence_path}",
            entities=len(self._kind_index),
        )
