"""Data management package for fraud surveillance.

Provides the storage adapter and schemas for:
- Announcements - corporate claims scored for credibility
- Social-media tips - stock tips scored for suspicion
- Market activity - unusual trading events tips are linked to

Storage adapters:
- EntityStore: revision-checked entity persistence
- EntityRepository: protocol any persistence backend must satisfy
"""

from fraud_surveillance.data_management.entity_store import EntityRepository, EntityStore

__all__ = [
    "EntityRepository",
    "EntityStore",
]
