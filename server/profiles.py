"""Profile and character repository: setup, edits, kills and rewards.

Profiles are the per-user progression record, keyed by the owner's user
id. Characters are free-form sheets a user may create any number of; they
share the profile document shape but live in their own collection.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from realm.errors import (
    AlreadyExistsError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from realm.models import CharacterClass, Profile, Session, new_id, utc_now
from realm.progression import attribute_preview, gain_experience, level_from_experience
from realm.tables import PROFILE_START_GOLD, PROFILE_START_HEALTH
from server.store import CHARACTERS, PROFILES, Filter, get_store

logger = logging.getLogger(__name__)

# Fields an owner may change on their own record; everything else is master-only
SELF_SERVICE_FIELDS = {"username", "char_class", "description", "faction", "image_url"}

# Never rewritten, not even by the master
IMMUTABLE_FIELDS = {"id", "user_id", "created_at"}


def _require_master(session: Session, action: str) -> None:
    if not session.is_master:
        logger.warning("User %s denied master action: %s", session.user_id, action)
        raise PermissionDeniedError(f"Only the master can {action}")


def _validated(data: dict) -> Profile:
    try:
        return Profile.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequestError(str(exc)) from exc


class ProfileRepository:
    """CRUD and progression mutations over one collection of profile documents."""

    collection = PROFILES
    restrict_classes = True

    def _check_class(self, char_class: str) -> None:
        if self.restrict_classes and char_class not in {c.value for c in CharacterClass}:
            raise InvalidRequestError(
                f"Unknown class {char_class!r}. Valid classes: {[c.value for c in CharacterClass]}"
            )

    def _check_owner(self, session: Session, profile: Profile) -> None:
        if profile.user_id != session.user_id and not session.is_master:
            raise PermissionDeniedError("You can only change your own record")

    def _starting_values(self, fields: dict) -> dict:
        return {
            "health": PROFILE_START_HEALTH,
            "max_health": PROFILE_START_HEALTH,
            "gold": PROFILE_START_GOLD,
        }

    def _new_id(self, session: Session) -> str:
        return session.user_id

    # --- Reads ---

    async def get(self, profile_id: str) -> Profile | None:
        store = await get_store()
        doc = await store.get(self.collection, profile_id)
        return Profile.model_validate(doc) if doc else None

    async def require(self, profile_id: str) -> Profile:
        profile = await self.get(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def list_all(self) -> list[Profile]:
        store = await get_store()
        docs = await store.query(self.collection, order_by=[("username", "asc")])
        return [Profile.model_validate(d) for d in docs]

    async def list_for_user(self, user_id: str) -> list[Profile]:
        store = await get_store()
        docs = await store.query(
            self.collection,
            filters=[Filter("user_id", "==", user_id)],
            order_by=[("level", "desc")],
        )
        return [Profile.model_validate(d) for d in docs]

    # --- Creation ---

    async def create(self, session: Session, fields: dict) -> Profile:
        """Create a record owned by the session user.

        Level is derived from any starting experience, never taken as given.
        """
        fields = {k: v for k, v in fields.items() if v is not None}
        if "char_class" in fields:
            self._check_class(fields["char_class"])
        forbidden = (IMMUTABLE_FIELDS | {"email", "is_master", "level"}) & fields.keys()
        if forbidden:
            raise InvalidRequestError(f"Cannot set {sorted(forbidden)} on creation")

        profile_id = self._new_id(session)
        data = {
            **self._starting_values(fields),
            **fields,
            "id": profile_id,
            "user_id": session.user_id,
            "email": session.email,
            "level": level_from_experience(fields.get("experience", 0)),
        }
        profile = _validated(data)

        store = await get_store()
        async with store.transaction():
            if await store.get(self.collection, profile_id) is not None:
                raise AlreadyExistsError("Profile already exists")
            await store.set(self.collection, profile_id, profile.model_dump(mode="json"))
        logger.info("Created %s record %s for user %s", self.collection, profile_id, session.user_id)
        return profile

    # --- Updates ---

    async def update(self, session: Session, profile_id: str, fields: dict) -> Profile:
        """Owner self-service edit: name, class, description, faction, avatar."""
        privileged = fields.keys() - SELF_SERVICE_FIELDS
        if privileged:
            raise PermissionDeniedError(
                f"Only the master can change {sorted(privileged)}"
            )
        if "char_class" in fields:
            self._check_class(fields["char_class"])
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            self._check_owner(session, profile)
            updated = _validated({**profile.model_dump(mode="json"), **fields, "updated_at": utc_now()})
            await store.set(self.collection, profile_id, updated.model_dump(mode="json"))
        return updated

    async def master_update(self, session: Session, profile_id: str, fields: dict) -> Profile:
        """Master override of any field: level, attributes, kills, gold, death.

        Editing experience without an explicit level re-derives the level.
        """
        _require_master(session, "edit this record")
        frozen = IMMUTABLE_FIELDS & fields.keys()
        if frozen:
            raise InvalidRequestError(f"Cannot change {sorted(frozen)}")
        if "char_class" in fields:
            self._check_class(fields["char_class"])
        if "experience" in fields and "level" not in fields:
            fields = {**fields, "level": level_from_experience(fields["experience"])}

        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            updated = _validated({**profile.model_dump(mode="json"), **fields, "updated_at": utc_now()})
            await store.set(self.collection, profile_id, updated.model_dump(mode="json"))
        logger.info("Master %s edited %s/%s: %s", session.user_id, self.collection, profile_id, sorted(fields))
        return updated

    async def delete(self, session: Session, profile_id: str) -> None:
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            self._check_owner(session, profile)
            await store.delete(self.collection, profile_id)
        logger.info("Deleted %s/%s (by %s)", self.collection, profile_id, session.user_id)

    # --- Progression ---

    async def grant_reward(self, profile_id: str, experience: int = 0, gold: int = 0) -> Profile:
        """Add experience and gold, keeping level in step with experience."""
        if experience < 0 or gold < 0:
            raise InvalidRequestError("Rewards cannot be negative")
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            new_experience, new_level = gain_experience(profile.experience, experience)
            doc = await store.update(self.collection, profile_id, {
                "experience": new_experience,
                "level": new_level,
                "gold": profile.gold + gold,
                "updated_at": utc_now(),
            })
        return Profile.model_validate(doc)

    async def kill_creature(
        self,
        session: Session,
        profile_id: str,
        creatures_killed: int = 1,
        experience_gained: int = 0,
        loot_gold: int = 0,
    ) -> Profile:
        if creatures_killed < 0 or experience_gained < 0 or loot_gold < 0:
            raise InvalidRequestError("Kill counts and rewards cannot be negative")
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            self._check_owner(session, profile)
            new_experience, new_level = gain_experience(profile.experience, experience_gained)
            doc = await store.update(self.collection, profile_id, {
                "creature_kills": profile.creature_kills + creatures_killed,
                "experience": new_experience,
                "level": new_level,
                "gold": profile.gold + loot_gold,
                "updated_at": utc_now(),
            })
        if new_level > profile.level:
            logger.info("%s/%s reached level %d", self.collection, profile_id, new_level)
        return Profile.model_validate(doc)

    async def record_player_kill(self, session: Session, profile_id: str, count: int = 1) -> Profile:
        _require_master(session, "record player kills")
        if count < 1:
            raise InvalidRequestError("Count must be at least 1")
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            doc = await store.update(self.collection, profile_id, {
                "player_kills": profile.player_kills + count,
                "updated_at": utc_now(),
            })
        return Profile.model_validate(doc)

    async def record_death(
        self,
        session: Session,
        profile_id: str,
        cause: str | None = None,
        deceased: bool = False,
    ) -> Profile:
        """Count a death. A permanent death marks the record deceased."""
        _require_master(session, "record deaths")
        store = await get_store()
        async with store.transaction():
            profile = await self.require(profile_id)
            fields: dict = {"deaths": profile.deaths + 1, "updated_at": utc_now()}
            if deceased:
                fields["is_deceased"] = True
                fields["cause_of_death"] = cause
            doc = await store.update(self.collection, profile_id, fields)
        logger.info("Recorded death for %s/%s (deceased=%s)", self.collection, profile_id, deceased)
        return Profile.model_validate(doc)

    # --- Master characters ---

    async def create_master_character(self, session: Session, fields: dict) -> Profile:
        """A master-owned NPC record in the profiles collection."""
        _require_master(session, "create master characters")
        fields = {k: v for k, v in fields.items() if v is not None}
        if "char_class" in fields:
            self._check_class(fields["char_class"])
        profile = _validated({
            **self._starting_values(fields),
            **fields,
            "id": new_id(),
            "user_id": session.user_id,
            "email": session.email,
            "is_master": True,
            "level": level_from_experience(fields.get("experience", 0)),
        })
        store = await get_store()
        await store.set(self.collection, profile.id, profile.model_dump(mode="json"))
        logger.info("Master %s created character %s", session.user_id, profile.id)
        return profile

    async def list_master_characters(self, session: Session) -> list[Profile]:
        _require_master(session, "list master characters")
        store = await get_store()
        docs = await store.query(
            self.collection,
            filters=[Filter("user_id", "==", session.user_id), Filter("is_master", "==", True)],
            order_by=[("created_at", "desc")],
        )
        return [Profile.model_validate(d) for d in docs]


class CharacterRepository(ProfileRepository):
    """Free-form character sheets; any class name, health and mana from attributes."""

    collection = CHARACTERS
    restrict_classes = False

    def _starting_values(self, fields: dict) -> dict:
        preview = attribute_preview(
            fields.get("constitution", 10), fields.get("intelligence", 10),
        )
        return {
            "health": preview.base_health,
            "max_health": preview.base_health,
            "mana": preview.base_mana,
            "max_mana": preview.base_mana,
            "gold": 0,
        }

    def _new_id(self, session: Session) -> str:
        return new_id()


profiles = ProfileRepository()
characters = CharacterRepository()
