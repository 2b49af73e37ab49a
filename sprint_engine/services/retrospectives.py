"""Retrospective service: sessions, feedback cards, votes and action items.

A sprint has at most one session. Cards and action items hang off the
session and go away with it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..clock import Clock, utc_now
from ..config import EngineConfig
from ..retrospective import (
    SessionSummary,
    build_settings,
    check_column,
    may_modify_card,
    next_order,
    require_facilitator,
    session_stats,
    votes_used,
)
from ..workflow.documents import (
    action_from_document,
    card_from_document,
    encode_value,
    session_from_document,
    to_document,
)
from ..workflow.exceptions import (
    ConflictError,
    ForbiddenError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from ..workflow.interface import RETRO_ACTIONS, RETRO_CARDS, RETRO_SESSIONS, DocumentStore
from ..workflow.models import (
    ActionItemStatus,
    RetrospectiveActionItem,
    RetrospectiveCard,
    RetrospectiveFormat,
    RetrospectivePhase,
    RetrospectiveSession,
    VoteAction,
)
from ..workflow.patches import ActionItemPatch, CardPatch, SessionPatch
from ..workflow.validation import (
    check_id_list,
    check_optional_date,
    coerce_enum,
    optional_text,
    require_text,
)
from .sprints import SprintService

logger = logging.getLogger(__name__)


class RetrospectiveService:
    def __init__(
        self,
        store: DocumentStore,
        sprints: SprintService,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.sprints = sprints
        self.config = config or EngineConfig()
        self.clock = clock or utc_now

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(
        self, sprint_id: str, format, actor_id: str, settings=None
    ) -> RetrospectiveSession:
        """Open the retrospective of a sprint with ``actor_id`` as facilitator."""
        await self.sprints.get_sprint(sprint_id)
        format = coerce_enum(RetrospectiveFormat, format, "format")
        actor_id = require_text(actor_id, "actor_id")
        if await self.store.find_one(RETRO_SESSIONS, {"sprint_id": sprint_id}) is not None:
            raise ConflictError(f"Sprint {sprint_id} already has a retrospective session")

        now = self.clock()
        session = RetrospectiveSession(
            id="",
            sprint_id=sprint_id,
            format=format,
            facilitator_id=actor_id,
            settings=build_settings(settings, self.config),
            created_at=now,
            updated_at=now,
        )
        session.id = await self._insert(RETRO_SESSIONS, session)
        logger.info(
            "Created %s retrospective %s for sprint %s", format.value, session.id, sprint_id
        )
        return session

    async def get_session(self, session_id: str) -> RetrospectiveSession:
        doc = await self.store.find_one(RETRO_SESSIONS, {"id": session_id})
        if doc is None:
            raise NotFoundError("Retrospective session", session_id)
        return session_from_document(doc)

    async def get_session_for_sprint(self, sprint_id: str) -> RetrospectiveSession:
        doc = await self.store.find_one(RETRO_SESSIONS, {"sprint_id": sprint_id})
        if doc is None:
            raise NotFoundError("Retrospective session for sprint", sprint_id)
        return session_from_document(doc)

    async def session_summary(self, session_id: str) -> SessionSummary:
        session = await self.get_session(session_id)
        cards = await self.list_cards(session_id)
        actions = await self.list_action_items(session_id)
        return SessionSummary(
            session=session,
            cards=cards,
            action_items=actions,
            stats=session_stats(cards, actions),
        )

    async def update_session(
        self, session_id: str, actor_id: str, patch: SessionPatch
    ) -> RetrospectiveSession:
        session = await self.get_session(session_id)
        require_facilitator(session, actor_id)
        changes = patch.changes()
        if not changes:
            return session

        if "phase" in changes:
            session.phase = coerce_enum(RetrospectivePhase, changes["phase"], "phase")
        if "settings" in changes:
            session.settings = build_settings(changes["settings"], self.config, session.settings)
        session.updated_at = self.clock()

        doc = to_document(session)
        await self.store.update_one(
            RETRO_SESSIONS,
            {"id": session_id},
            {"$set": {k: doc[k] for k in sorted(set(changes) | {"updated_at"})}},
        )
        logger.info("Updated retrospective %s: %s", session_id, ", ".join(sorted(changes)))
        return session

    async def delete_session(self, session_id: str, actor_id: str) -> dict[str, int]:
        """Delete the session with all of its cards and action items.

        Children go first, so an interrupted delete never leaves cards whose
        session is gone.
        """
        session = await self.get_session(session_id)
        require_facilitator(session, actor_id)
        cards = await self.store.delete_many(RETRO_CARDS, {"session_id": session_id})
        actions = await self.store.delete_many(RETRO_ACTIONS, {"session_id": session_id})
        await self.store.delete_one(RETRO_SESSIONS, {"id": session_id})
        logger.info(
            "Deleted retrospective %s (%d cards, %d action items)", session_id, cards, actions
        )
        return {"cards": cards, "action_items": actions}

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    async def list_cards(self, session_id: str, column: str | None = None) -> list[RetrospectiveCard]:
        filter: dict = {"session_id": session_id}
        if column is not None:
            filter["column"] = column
        docs = await self.store.find(RETRO_CARDS, filter, sort=[("column", 1), ("order", 1)])
        return [card_from_document(d) for d in docs]

    async def get_card(self, card_id: str) -> RetrospectiveCard:
        doc = await self.store.find_one(RETRO_CARDS, {"id": card_id})
        if doc is None:
            raise NotFoundError("Card", card_id)
        return card_from_document(doc)

    async def add_card(
        self,
        session_id: str,
        column: str,
        content: str,
        author_id: str,
        is_anonymous: bool = False,
    ) -> RetrospectiveCard:
        session = await self.get_session(session_id)
        column = check_column(session, column)
        content = require_text(content, "content", self.config.card_content_max_length)
        author_id = require_text(author_id, "author_id")
        if is_anonymous and not session.settings.allow_anonymous:
            raise ValidationError(
                "Anonymous cards are not allowed in this session", field="is_anonymous"
            )

        now = self.clock()
        card = RetrospectiveCard(
            id="",
            session_id=session_id,
            sprint_id=session.sprint_id,
            column=column,
            content=content,
            author_id=author_id,
            is_anonymous=bool(is_anonymous),
            order=next_order(await self.list_cards(session_id, column)),
            created_at=now,
            updated_at=now,
        )
        card.id = await self._insert(RETRO_CARDS, card)
        logger.debug("Added card %s to %s/%s", card.id, session_id, column)
        return card

    async def update_card(
        self, card_id: str, actor_id: str, patch: CardPatch
    ) -> RetrospectiveCard:
        card = await self.get_card(card_id)
        changes = patch.changes()
        if not changes:
            return card

        if "content" in changes:
            if not may_modify_card(card, actor_id):
                raise ForbiddenError("Only the author can edit this card")
            card.content = require_text(
                changes["content"], "content", self.config.card_content_max_length
            )
        if "group_id" in changes:
            card.group_id = changes["group_id"] or None
        if "group_title" in changes:
            title = changes["group_title"]
            card.group_title = optional_text(title, "group_title") if title is not None else None
        if "order" in changes:
            order = changes["order"]
            if isinstance(order, bool) or not isinstance(order, int) or order < 0:
                raise ValidationError("order must be a non-negative integer", field="order")
            card.order = order
        card.updated_at = self.clock()

        doc = to_document(card)
        await self.store.update_one(
            RETRO_CARDS,
            {"id": card_id},
            {"$set": {k: doc[k] for k in sorted(set(changes) | {"updated_at"})}},
        )
        return card

    async def vote(self, card_id: str, user_id: str, action=VoteAction.ADD) -> RetrospectiveCard:
        """Add or remove ``user_id``'s vote on a card.

        Adding a vote the user already cast, or removing one they never
        cast, changes nothing. The cap counts distinct cards voted on
        within the session.
        """
        action = coerce_enum(VoteAction, action, "action")
        user_id = require_text(user_id, "user_id")
        card = await self.get_card(card_id)

        if action is VoteAction.ADD:
            if user_id in card.votes:
                return card
            session = await self.get_session(card.session_id)
            limit = session.settings.votes_per_person
            if votes_used(await self.list_cards(card.session_id), user_id) >= limit:
                raise LimitExceededError(user_id, limit)
            update = {"$addToSet": {"votes": user_id}}
        else:
            if user_id not in card.votes:
                return card
            update = {"$pull": {"votes": user_id}}

        update["$set"] = {"updated_at": encode_value(self.clock())}
        doc = await self.store.find_one_and_update(RETRO_CARDS, {"id": card_id}, update)
        if doc is None:
            raise NotFoundError("Card", card_id)
        logger.debug("Vote %s by %s on card %s", action.value, user_id, card_id)
        return card_from_document(doc)

    async def delete_card(self, card_id: str, actor_id: str) -> list[str]:
        """Delete a card and unlink it from action items.

        Returns the ids of the action items that referenced it.
        """
        card = await self.get_card(card_id)
        if not may_modify_card(card, actor_id):
            raise ForbiddenError("Only the author can delete this card")

        await self.store.delete_one(RETRO_CARDS, {"id": card_id})
        now = encode_value(self.clock())
        unlinked = []
        for doc in await self.store.find(RETRO_ACTIONS, {"card_ids": card_id}):
            await self.store.update_one(
                RETRO_ACTIONS,
                {"id": doc["id"]},
                {"$pull": {"card_ids": card_id}, "$set": {"updated_at": now}},
            )
            unlinked.append(doc["id"])
        logger.debug("Deleted card %s, unlinked from %d action items", card_id, len(unlinked))
        return unlinked

    # ------------------------------------------------------------------
    # Action items
    # ------------------------------------------------------------------

    async def list_action_items(self, session_id: str) -> list[RetrospectiveActionItem]:
        docs = await self.store.find(
            RETRO_ACTIONS, {"session_id": session_id}, sort=[("created_at", -1)]
        )
        return [action_from_document(d) for d in docs]

    async def get_action_item(self, action_id: str) -> RetrospectiveActionItem:
        doc = await self.store.find_one(RETRO_ACTIONS, {"id": action_id})
        if doc is None:
            raise NotFoundError("Action item", action_id)
        return action_from_document(doc)

    async def create_action_item(
        self,
        session_id: str,
        title: str,
        description: str = "",
        assignee_id: str | None = None,
        due_date=None,
        card_ids: Iterable[str] | None = None,
    ) -> RetrospectiveActionItem:
        session = await self.get_session(session_id)
        now = self.clock()
        action = RetrospectiveActionItem(
            id="",
            session_id=session_id,
            sprint_id=session.sprint_id,
            title=require_text(title, "title", self.config.action_title_max_length),
            description=optional_text(description, "description"),
            assignee_id=assignee_id or None,
            due_date=check_optional_date(due_date, "due_date"),
            card_ids=await self._check_cards(session_id, card_ids),
            created_at=now,
            updated_at=now,
        )
        action.id = await self._insert(RETRO_ACTIONS, action)
        logger.info("Created action item %s in retrospective %s", action.id, session_id)
        return action

    async def update_action_item(
        self, action_id: str, patch: ActionItemPatch
    ) -> RetrospectiveActionItem:
        action = await self.get_action_item(action_id)
        changes = patch.changes()
        if not changes:
            return action

        if "title" in changes:
            action.title = require_text(
                changes["title"], "title", self.config.action_title_max_length
            )
        if "description" in changes:
            action.description = optional_text(changes["description"], "description")
        if "assignee_id" in changes:
            action.assignee_id = changes["assignee_id"] or None
        if "status" in changes:
            action.status = coerce_enum(ActionItemStatus, changes["status"], "status")
        if "due_date" in changes:
            action.due_date = check_optional_date(changes["due_date"], "due_date")
        if "card_ids" in changes:
            action.card_ids = await self._check_cards(action.session_id, changes["card_ids"])
        action.updated_at = self.clock()

        doc = to_document(action)
        await self.store.update_one(
            RETRO_ACTIONS,
            {"id": action_id},
            {"$set": {k: doc[k] for k in sorted(set(changes) | {"updated_at"})}},
        )
        return action

    async def delete_action_item(self, action_id: str) -> None:
        if not await self.store.delete_one(RETRO_ACTIONS, {"id": action_id}):
            raise NotFoundError("Action item", action_id)
        logger.info("Deleted action item %s", action_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _check_cards(self, session_id: str, card_ids) -> list[str]:
        card_ids = check_id_list(card_ids, "card_ids")
        if not card_ids:
            return []
        found = await self.store.find(
            RETRO_CARDS, {"id": {"$in": card_ids}, "session_id": session_id}
        )
        missing = set(card_ids) - {d["id"] for d in found}
        if missing:
            raise ValidationError(
                f"Cards not in this session: {', '.join(sorted(missing))}", field="card_ids"
            )
        return card_ids

    async def _insert(self, collection: str, entity) -> str:
        doc = to_document(entity)
        del doc["id"]
        return await self.store.insert_one(collection, doc)
