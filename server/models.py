"""Pydantic request/response models for the API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from realm.models import (
    AgentRarity,
    AgentStats,
    Item,
    ItemRarity,
    ItemType,
    Mission,
    MissionDifficulty,
    MissionRequirements,
    MissionReward,
    MissionStatus,
    Profile,
)


def _strip_null_bytes(v: str) -> str:
    """Remove null bytes from user-supplied strings."""
    return v.replace("\x00", "")


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


# --- Auth ---

class SignUpRequest(_Request):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=256)
    display_name: str | None = Field(default=None, max_length=64)


class SignInRequest(_Request):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=256)


class MeResponse(BaseModel):
    user_id: str
    email: str
    display_name: str | None = None
    is_master: bool = False


class AuthResponse(MeResponse):
    token: str


# --- Profiles & characters ---

class _Attributes(_Request):
    strength: int | None = Field(default=None, ge=1, le=20)
    dexterity: int | None = Field(default=None, ge=1, le=20)
    constitution: int | None = Field(default=None, ge=1, le=20)
    intelligence: int | None = Field(default=None, ge=1, le=20)
    wisdom: int | None = Field(default=None, ge=1, le=20)
    charisma: int | None = Field(default=None, ge=1, le=20)


class ProfileCreateRequest(_Attributes):
    username: str = Field(min_length=1, max_length=64)
    char_class: str = Field(min_length=1, max_length=64)
    faction: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=2000)
    image_url: str | None = Field(default=None, max_length=2000)

    @field_validator("username", "char_class")
    @classmethod
    def _sanitize_strings(cls, v: str) -> str:
        return _strip_null_bytes(v).strip()


class MasterCharacterRequest(ProfileCreateRequest):
    experience: int | None = Field(default=None, ge=0)
    health: int | None = None
    max_health: int | None = None
    mana: int | None = None
    max_mana: int | None = None
    gold: int | None = Field(default=None, ge=0)


class ProfileUpdateRequest(_Request):
    username: str | None = Field(default=None, min_length=1, max_length=64)
    char_class: str | None = Field(default=None, min_length=1, max_length=64)
    faction: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=2000)
    image_url: str | None = Field(default=None, max_length=2000)


class MasterProfileUpdateRequest(_Attributes):
    """Any field of a profile except its identity; send only what changes."""
    username: str | None = Field(default=None, min_length=1, max_length=64)
    char_class: str | None = Field(default=None, min_length=1, max_length=64)
    level: int | None = Field(default=None, ge=1)
    experience: int | None = Field(default=None, ge=0)
    health: int | None = None
    max_health: int | None = None
    mana: int | None = None
    max_mana: int | None = None
    creature_kills: int | None = Field(default=None, ge=0)
    player_kills: int | None = Field(default=None, ge=0)
    deaths: int | None = Field(default=None, ge=0)
    gold: int | None = Field(default=None, ge=0)
    inventory: list[Item] | None = None
    faction: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_deceased: bool | None = None
    cause_of_death: str | None = None


class KillRequest(_Request):
    creatures_killed: int = Field(default=1, ge=0)
    experience_gained: int = Field(default=0, ge=0)
    loot_gold: int = Field(default=0, ge=0)


class DeathRequest(_Request):
    cause: str | None = Field(default=None, max_length=500)
    deceased: bool = False


class PlayerKillRequest(_Request):
    count: int = Field(default=1, ge=1)


# --- Shop ---

class ShopItemCreateRequest(_Request):
    name: str = Field(min_length=1, max_length=128)
    description: str = Field(default="", max_length=2000)
    type: ItemType = ItemType.OTHER
    rarity: ItemRarity = ItemRarity.COMMON
    price: int = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    damage: int | None = None
    defense: int | None = None
    image_url: str | None = None
    effect: str | None = None


class ShopItemUpdateRequest(_Request):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=2000)
    type: ItemType | None = None
    rarity: ItemRarity | None = None
    price: int | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    damage: int | None = None
    defense: int | None = None
    image_url: str | None = None
    effect: str | None = None


class BuyRequest(_Request):
    quantity: int = 1
    profile_id: str | None = None


class RestockRequest(_Request):
    amount: int


class PurchaseResponse(BaseModel):
    item: Item
    quantity: int
    total_price: int
    gold_remaining: int
    stock_remaining: int


# --- Agents ---

class AgentCreateRequest(_Request):
    name: str = Field(min_length=1, max_length=64)
    description: str = Field(default="", max_length=2000)
    price: int = Field(ge=0)
    image_url: str = ""
    stats: AgentStats = Field(default_factory=AgentStats)
    special_ability: str = ""
    rarity: AgentRarity = AgentRarity.COMMON


class AgentUpdateRequest(_Request):
    name: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=2000)
    price: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    stats: AgentStats | None = None
    special_ability: str | None = None
    rarity: AgentRarity | None = None


class RecruitRequest(_Request):
    profile_id: str | None = None


# --- Missions ---

class MissionCreateRequest(_Request):
    title: str = Field(min_length=1, max_length=128)
    description: str = Field(default="", max_length=4000)
    difficulty: MissionDifficulty = MissionDifficulty.EASY
    reward: MissionReward = Field(default_factory=MissionReward)
    requirements: MissionRequirements | None = None

    @field_validator("title", "description")
    @classmethod
    def _sanitize_strings(cls, v: str) -> str:
        return _strip_null_bytes(v)


class MissionUpdateRequest(_Request):
    title: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=4000)
    difficulty: MissionDifficulty | None = None
    status: MissionStatus | None = None
    reward: MissionReward | None = None
    requirements: MissionRequirements | None = None


class CompletionResponse(BaseModel):
    mission: Mission
    reward_granted: bool
    profile: Profile | None = None


# --- Teams ---

class TeamCreateRequest(_Request):
    name: str = Field(min_length=1, max_length=64)
    username: str = Field(min_length=1, max_length=64)
    description: str = Field(default="", max_length=2000)
    max_members: int | None = None
    """Clamped to 2..20; the configured default when omitted."""

    @field_validator("name", "username", "description")
    @classmethod
    def _sanitize_strings(cls, v: str) -> str:
        return _strip_null_bytes(v)


class JoinTeamRequest(_Request):
    username: str = Field(min_length=1, max_length=64)


class MaxMembersRequest(_Request):
    max_members: int


class TeamMemberRequest(_Request):
    user_id: str


class MoveMemberRequest(_Request):
    user_id: str
    username: str = Field(min_length=1, max_length=64)
    team_id: str | None = None
    """Destination team, or None to only remove the user from their team."""
