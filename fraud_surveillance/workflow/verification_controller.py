"""Evidence submission workflow for announcements and social-media tips.

Each submission runs one load -> merge -> score -> classify -> append -> save
cycle against a single entity:

1. Validate the submission method and the evidence delta for the entity type
2. Merge the delta into the evidence snapshot (set fields overwrite,
   cross-references append)
3. Recompute the score with the rules engine
4. Reclassify, unless an analyst override is given on a manual-review or
   comprehensive-verification submission (the computed score is still kept)
5. Append one EvidenceEvent to the ledger
6. Save with a single compare-and-swap

A save that loses the race raises VersionConflictError in the store; the whole
cycle is retried on a fresh read with exponential back-off, and ConflictError
is raised once the attempt budget is spent. Validation and precondition errors
are never retried.

Usage:
    from fraud_surveillance.workflow import VerificationController
    from fraud_surveillance.data_management import EntityStore

    controller = VerificationController(EntityStore())
    announcement = await controller.create_announcement(company_id="ACME", title="...")
    updated = await controller.submit_evidence(
        announcement.announcement_id,
        {"counter_party": {"status": "confirmed"}},
        "counter-party-verification",
        notes="Confirmed by ACME investor relations",
    )
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fraud_surveillance.config import scoring_rules as rules
from fraud_surveillance.config.settings import Settings
from fraud_surveillance.config.settings import settings as default_settings
from fraud_surveillance.data_management.entity_store import EntityRepository
from fraud_surveillance.data_management.schemas import (
    OVERRIDE_METHODS,
    ActivityType,
    AlertRecord,
    AlertSpec,
    Announcement,
    AnnouncementEvidenceDelta,
    AnnouncementStatus,
    Entity,
    EvidenceEvent,
    MarketActivity,
    MarketActivityLink,
    ScoredEntity,
    SocialMediaTip,
    SubmissionMethod,
    TipEvidenceDelta,
    TipLink,
    TipStatus,
    TriState,
)
from fraud_surveillance.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InvalidSubmissionError,
    PreconditionFailedError,
    SurveillanceError,
    VersionConflictError,
)
from fraud_surveillance.scoring.rules_engine import (
    ScoreBreakdown,
    explain_announcement_score,
    explain_tip_score,
)
from fraud_surveillance.scoring.status_classifier import StatusClassifier
from fraud_surveillance.utils.logging import get_structured_logger, submission_context
from fraud_surveillance.workflow.alerting import AlertDispatcher, LogAlertDispatcher

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# Announcement methods that target exactly one evidence category
TARGETED_CATEGORIES: dict[SubmissionMethod, str] = {
    SubmissionMethod.COUNTER_PARTY_VERIFICATION: "counter_party",
    SubmissionMethod.HISTORICAL_FILING_CHECK: "historical",
    SubmissionMethod.CONTENT_ANALYSIS: "content",
    SubmissionMethod.PUBLIC_DOMAIN_CHECK: "public_domain",
    SubmissionMethod.CROSS_REFERENCE: "cross_references",
}

ANNOUNCEMENT_METHODS = frozenset(TARGETED_CATEGORIES) | OVERRIDE_METHODS
TIP_METHODS = OVERRIDE_METHODS | {SubmissionMethod.MARKET_ACTIVITY_LINK}

EvidenceDelta = Union[AnnouncementEvidenceDelta, TipEvidenceDelta, Mapping[str, Any], None]


class VerificationController:
    """Orchestrates evidence submissions, alerts and history reads.

    Collaborators are injected: the entity repository, a clock, an alert
    dispatcher and settings. The controller holds no entity state of its own.
    """

    def __init__(
        self,
        store: EntityRepository,
        clock: Clock = utc_now,
        dispatcher: Optional[AlertDispatcher] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize VerificationController.

        Args:
            store: Entity repository with compare-and-swap saves.
            clock: Callable returning the current timezone-aware time.
            dispatcher: Alert delivery; defaults to LogAlertDispatcher.
            settings: Thresholds and retry budget; defaults to the global settings.
        """
        self.store = store
        self.clock = clock
        self.dispatcher = dispatcher or LogAlertDispatcher()
        self.settings = settings or default_settings
        self.classifier = StatusClassifier.from_settings(self.settings)
        self._logger = get_structured_logger(__name__, component="VerificationController")

    # ------------------------------------------------------------------
    # Entity creation
    # ------------------------------------------------------------------

    async def create_announcement(
        self,
        company_id: str,
        title: str,
        body: str = "",
        published_at: Optional[datetime] = None,
        announcement_id: Optional[str] = None,
    ) -> Announcement:
        """Register a new announcement as pending with no score and no history.

        Status, score, evidence, history and alerts always start empty; they
        change only through evidence submissions and alerts.
        """
        fields: dict[str, Any] = {
            "company_id": company_id,
            "title": title,
            "body": body,
            "published_at": published_at or self.clock(),
        }
        if announcement_id is not None:
            fields["announcement_id"] = announcement_id
        announcement = self._build(Announcement, **fields)
        created = await self.store.create(announcement)
        self._logger.info(
            "announcement_created",
            entity_id=created.entity_id,
            company_id=company_id,
        )
        return created

    async def create_tip(
        self,
        platform: str,
        author_handle: str,
        content: str,
        stock_symbol: Optional[str] = None,
        author_verified: Optional[bool] = None,
        author_account_age_days: Optional[int] = None,
        published_at: Optional[datetime] = None,
    ) -> SocialMediaTip:
        """Register a new social-media tip as pending with no score and no history.

        Author attributes given here are the tip's initial evidence; they are
        not scored until the first submission.
        """
        tip = self._build(
            SocialMediaTip,
            platform=platform,
            author={"handle": author_handle},
            stock_symbol=stock_symbol,
            published_at=published_at or self.clock(),
            evidence={
                "author_verified": TriState.from_optional(author_verified),
                "author_account_age_days": author_account_age_days,
                "content": content,
            },
        )
        created = await self.store.create(tip)
        self._logger.info("tip_created", entity_id=created.entity_id, platform=platform)
        return created

    async def record_market_activity(
        self,
        stock_symbol: str,
        activity_type: Union[ActivityType, str],
        description: str = "",
        observed_at: Optional[datetime] = None,
    ) -> MarketActivity:
        """Record an unusual trading event that tips can later be linked to."""
        activity = self._build(
            MarketActivity,
            stock_symbol=stock_symbol,
            activity_type=activity_type,
            description=description,
            observed_at=observed_at or self.clock(),
        )
        created = await self.store.create(activity)
        self._logger.info(
            "market_activity_recorded",
            entity_id=created.entity_id,
            stock_symbol=stock_symbol,
            activity_type=created.activity_type.value,
        )
        return created

    # ------------------------------------------------------------------
    # Evidence submission
    # ------------------------------------------------------------------

    async def submit_evidence(
        self,
        entity_id: str,
        evidence_delta: EvidenceDelta,
        method: Union[SubmissionMethod, str],
        notes: str = "",
        status_override: Optional[Union[AnnouncementStatus, TipStatus, str]] = None,
        submitted_by: Optional[str] = None,
    ) -> ScoredEntity:
        """Apply one evidence submission and return the saved entity.

        Args:
            entity_id: Announcement or tip id.
            evidence_delta: Delta model or JSON-compatible dict of evidence fields.
            method: Submission method (event kind).
            notes: Free-text analyst notes recorded on the event.
            status_override: Analyst-chosen status; manual-review and
                comprehensive-verification only.
            submitted_by: Analyst or job identifier.

        Returns:
            Updated Announcement or SocialMediaTip as saved.

        Raises:
            EntityNotFoundError: Unknown entity id.
            InvalidSubmissionError: Bad method, delta or override. Entity unchanged.
            ConflictError: Concurrent updates exhausted the retry budget.
        """
        return await self._submit(
            entity_id,
            evidence_delta,
            self._parse_method(method),
            notes,
            status_override,
            submitted_by,
        )

    async def _submit(
        self,
        entity_id: str,
        evidence_delta: EvidenceDelta,
        method: SubmissionMethod,
        notes: str,
        status_override: Any,
        submitted_by: Optional[str],
        extra_updates: Optional[Callable[[ScoredEntity], dict[str, Any]]] = None,
    ) -> ScoredEntity:
        log = self._logger.bind(entity_id=entity_id, method=method.value)

        async def apply() -> ScoredEntity:
            return await self._apply_submission(
                entity_id,
                evidence_delta,
                method,
                notes,
                status_override,
                submitted_by,
                log,
                extra_updates,
            )

        with submission_context(entity_id, method.value):
            return await self._run_with_retries(entity_id, apply, log)

    async def _apply_submission(
        self,
        entity_id: str,
        evidence_delta: EvidenceDelta,
        method: SubmissionMethod,
        notes: str,
        status_override: Any,
        submitted_by: Optional[str],
        log: Any,
        extra_updates: Optional[Callable[[ScoredEntity], dict[str, Any]]] = None,
    ) -> ScoredEntity:
        entity = await self._load(entity_id)
        if isinstance(entity, MarketActivity):
            raise InvalidSubmissionError(
                f"market activity {entity_id} is not scored; link it to a tip instead"
            )

        self._check_method(entity, method)
        delta = self._parse_delta(entity, evidence_delta)
        self._check_categories(entity, method, delta)
        override = self._parse_override(entity, method, status_override)
        now = self.clock()

        if isinstance(entity, Announcement):
            evidence = entity.evidence.merge(delta)
            breakdown = explain_announcement_score(evidence)
            new_status = override or self.classifier.classify_announcement(breakdown.score)
            updates: dict[str, Any] = {
                "evidence": evidence,
                "credibility_score": breakdown.score,
                "verification_status": new_status,
                "last_verified_at": now,
            }
        else:
            evidence = entity.evidence.merge(delta)
            market_context = entity.market_context.merge(delta)
            breakdown = explain_tip_score(evidence, market_context)
            if override is not None:
                new_status = override
            elif self.settings.tip_auto_classification:
                new_status = self.classifier.classify_tip(breakdown.score)
            else:
                new_status = entity.analysis_status
            updates = {
                "evidence": evidence,
                "market_context": market_context,
                "suspicious_score": breakdown.score,
                "analysis_status": new_status,
                "last_analyzed_at": now,
            }

        self._check_score(entity_id, breakdown)
        if extra_updates is not None:
            updates.update(extra_updates(entity))

        event = EvidenceEvent(
            timestamp=now,
            method=method,
            status=new_status.value,
            score=breakdown.score,
            previous_status=entity.status.value,
            previous_score=entity.score,
            status_overridden=override is not None,
            notes=notes,
            submitted_by=submitted_by,
            contributions=breakdown.contributions,
            evidence_delta=delta.model_dump(mode="json", include=delta.model_fields_set),
        )
        updates["verification_history"] = entity.verification_history.append(event)

        saved = await self.store.save(entity.model_copy(update=updates))

        log.info(
            "evidence_submitted",
            event_id=event.event_id,
            score=breakdown.score,
            previous_score=entity.score,
            status=new_status.value,
            revision=saved.revision,
        )
        if new_status != entity.status:
            log.info(
                "status_changed",
                from_status=entity.status.value,
                to_status=new_status.value,
                overridden=override is not None,
            )
        return saved

    async def link_tip_to_activity(
        self,
        tip_id: str,
        activity_id: str,
        notes: str = "",
        submitted_by: Optional[str] = None,
    ) -> SocialMediaTip:
        """Link a tip to observed market activity and rescore it.

        The link is recorded as a market-activity-link submission on the tip.
        A volume surge supplies unusual-volume evidence; other activity types
        link without changing the market context.

        The activity's back-reference is saved first. The tip's score, history
        entry and link are then saved together in one submission. If that
        submission fails, the back-reference is removed again before the
        error propagates.
        """
        activity = await self._load(activity_id)
        if not isinstance(activity, MarketActivity):
            raise InvalidSubmissionError(f"{activity_id} is not a market activity")
        tip = await self._load(tip_id)
        if not isinstance(tip, SocialMediaTip):
            raise InvalidSubmissionError(f"{tip_id} is not a social-media tip")

        delta = TipEvidenceDelta()
        if activity.activity_type == ActivityType.VOLUME_SURGE:
            delta = TipEvidenceDelta(unusual_volume=TriState.TRUE)

        linked_at = self.clock()
        log = self._logger.bind(entity_id=tip_id, activity_id=activity_id)
        back_link = TipLink(
            tip_id=tip_id,
            platform=tip.platform,
            author_handle=tip.author.handle,
            linked_at=linked_at,
        )
        tip_link = MarketActivityLink(
            activity_id=activity_id,
            stock_symbol=activity.stock_symbol,
            activity_type=activity.activity_type,
            linked_at=linked_at,
        )

        await self._run_with_retries(
            activity_id, lambda: self._set_back_link(activity_id, back_link, present=True), log
        )
        try:
            linked = await self._submit(
                tip_id,
                delta,
                SubmissionMethod.MARKET_ACTIVITY_LINK,
                notes or f"Linked to {activity.activity_type.value} on {activity.stock_symbol}",
                None,
                submitted_by,
                extra_updates=lambda current: {
                    "linked_market_activity": current.linked_market_activity + [tip_link]
                },
            )
        except SurveillanceError:
            log.warning("tip_link_rolled_back")
            await self._run_with_retries(
                activity_id, lambda: self._set_back_link(activity_id, back_link, present=False), log
            )
            raise

        log.info(
            "tip_linked_to_activity",
            activity_type=activity.activity_type.value,
            score=linked.suspicious_score,
        )
        return linked

    async def _set_back_link(self, activity_id: str, back_link: TipLink, present: bool) -> Entity:
        """Add or remove one back-reference; a no-op when already in that state."""
        activity = await self._load(activity_id)
        links = [link for link in activity.linked_tips if link != back_link]
        if present:
            links.append(back_link)
        if links == activity.linked_tips:
            return activity
        return await self.store.save(activity.model_copy(update={"linked_tips": links}))

    # ------------------------------------------------------------------
    # Alerts and history
    # ------------------------------------------------------------------

    async def send_alert(
        self,
        entity_id: str,
        alert_spec: Union[AlertSpec, Mapping[str, Any]],
    ) -> AlertRecord:
        """Record an alert on a fraudulent announcement and dispatch it.

        Score, status, evidence and history are left untouched.

        Raises:
            InvalidSubmissionError: Missing recipients or message.
            EntityNotFoundError: Unknown entity id.
            PreconditionFailedError: Not an announcement, or not fraudulent.
            ConflictError: Concurrent updates exhausted the retry budget.
        """
        spec = self._parse_alert_spec(alert_spec)
        log = self._logger.bind(entity_id=entity_id, alert_type=spec.alert_type.value)

        async def append() -> AlertRecord:
            entity = await self._load(entity_id)
            if not isinstance(entity, Announcement):
                raise PreconditionFailedError(
                    f"alerts can only be sent for announcements, not {entity.kind}"
                )
            if entity.verification_status != AnnouncementStatus.FRAUDULENT:
                raise PreconditionFailedError(
                    f"announcement {entity_id} is {entity.verification_status.value}; "
                    "alerts require fraudulent status"
                )
            record = AlertRecord.from_spec(entity.announcement_id, spec, self.clock())
            await self.store.append_alert(entity.announcement_id, record, entity.revision)
            return record

        with submission_context(entity_id, "send-alert"):
            record = await self._run_with_retries(entity_id, append, log)
        log.info(
            "alert_recorded",
            alert_id=record.alert_id,
            recipients=len(record.recipients),
        )

        try:
            await self.dispatcher.dispatch(record)
        except Exception as e:
            log.error("alert_dispatch_failed", alert_id=record.alert_id, error=str(e))
            raise

        return record

    async def get_history(self, entity_id: str) -> tuple[EvidenceEvent, ...]:
        """Ordered evidence events for an announcement or tip."""
        entity = await self._load(entity_id)
        if isinstance(entity, MarketActivity):
            raise InvalidSubmissionError(f"market activity {entity_id} has no evidence history")
        return entity.verification_history.events

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_with_retries(
        self,
        entity_id: str,
        operation: Callable[[], Awaitable[T]],
        log: Any,
    ) -> T:
        """Run ``operation`` retrying only on version conflicts."""
        max_attempts = self.settings.submission_max_attempts

        def before_sleep(retry_state) -> None:
            log.warning(
                "version_conflict_retry",
                attempt=retry_state.attempt_number,
                max_attempts=max_attempts,
            )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(
                    multiplier=self.settings.submission_retry_multiplier,
                    max=self.settings.submission_retry_max_wait,
                ),
                retry=retry_if_exception_type(VersionConflictError),
                before_sleep=before_sleep,
                reraise=True,
            ):
                with attempt:
                    return await operation()
        except VersionConflictError as e:
            log.error("conflict_retries_exhausted", attempts=max_attempts)
            raise ConflictError(entity_id, max_attempts) from e
        raise ConflictError(entity_id, max_attempts)

    async def _load(self, entity_id: str) -> Entity:
        entity = await self.store.load(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity

    @staticmethod
    def _build(model: type[BaseModel], **fields: Any) -> Any:
        try:
            return model.model_validate(fields)
        except ValidationError as e:
            raise InvalidSubmissionError(f"invalid {model.__name__}: {e}") from e

    @staticmethod
    def _parse_method(method: Union[SubmissionMethod, str]) -> SubmissionMethod:
        try:
            return SubmissionMethod(method)
        except ValueError as e:
            raise InvalidSubmissionError(f"unknown submission method: {method!r}") from e

    @staticmethod
    def _check_method(entity: ScoredEntity, method: SubmissionMethod) -> None:
        allowed = ANNOUNCEMENT_METHODS if isinstance(entity, Announcement) else TIP_METHODS
        if method not in allowed:
            raise InvalidSubmissionError(
                f"{method.value} does not apply to {entity.kind} {entity.entity_id}"
            )

    @staticmethod
    def _parse_delta(
        entity: ScoredEntity, evidence_delta: EvidenceDelta
    ) -> Union[AnnouncementEvidenceDelta, TipEvidenceDelta]:
        delta_model = (
            AnnouncementEvidenceDelta if isinstance(entity, Announcement) else TipEvidenceDelta
        )
        if evidence_delta is None:
            return delta_model()
        if isinstance(evidence_delta, delta_model):
            return evidence_delta
        if isinstance(evidence_delta, BaseModel) or not isinstance(evidence_delta, Mapping):
            raise InvalidSubmissionError(
                f"{entity.kind} evidence must be a {delta_model.__name__} or a mapping"
            )
        try:
            return delta_model.model_validate(dict(evidence_delta))
        except ValidationError as e:
            raise InvalidSubmissionError(f"malformed evidence delta: {e}") from e

    @staticmethod
    def _check_categories(
        entity: ScoredEntity,
        method: SubmissionMethod,
        delta: Union[AnnouncementEvidenceDelta, TipEvidenceDelta],
    ) -> None:
        categories = delta.categories()
        if isinstance(entity, Announcement):
            target = TARGETED_CATEGORIES.get(method)
            if target is not None and categories != {target}:
                raise InvalidSubmissionError(
                    f"{method.value} submissions must carry {target} evidence only, "
                    f"got {sorted(categories) or 'none'}"
                )
        elif method == SubmissionMethod.MARKET_ACTIVITY_LINK and not categories <= {"unusual_volume"}:
            raise InvalidSubmissionError(
                "market-activity-link submissions may only carry unusual_volume"
            )

    @staticmethod
    def _parse_override(
        entity: ScoredEntity,
        method: SubmissionMethod,
        status_override: Any,
    ) -> Optional[Union[AnnouncementStatus, TipStatus]]:
        if status_override is None:
            return None
        if method not in OVERRIDE_METHODS:
            raise InvalidSubmissionError(
                f"status override is not allowed on {method.value} submissions"
            )
        status_enum = AnnouncementStatus if isinstance(entity, Announcement) else TipStatus
        value = getattr(status_override, "value", status_override)
        try:
            status = status_enum(value)
        except ValueError as e:
            raise InvalidSubmissionError(
                f"{value!r} is not a valid {entity.kind} status"
            ) from e
        if status.value == "pending":
            raise InvalidSubmissionError("an evaluated entity cannot be overridden to pending")
        return status

    @staticmethod
    def _check_score(entity_id: str, breakdown: ScoreBreakdown) -> None:
        if not rules.SCORE_MIN <= breakdown.score <= rules.SCORE_MAX:
            raise InvalidSubmissionError(
                f"score {breakdown.score} for {entity_id} is outside "
                f"[{rules.SCORE_MIN}, {rules.SCORE_MAX}]"
            )

    @staticmethod
    def _parse_alert_spec(alert_spec: Union[AlertSpec, Mapping[str, Any]]) -> AlertSpec:
        if isinstance(alert_spec, AlertSpec):
            return alert_spec
        if not isinstance(alert_spec, Mapping):
            raise InvalidSubmissionError("alert spec must be an AlertSpec or a mapping")
        try:
            return AlertSpec.model_validate(dict(alert_spec))
        except ValidationError as e:
            raise InvalidSubmissionError(f"invalid alert: {e}") from e
