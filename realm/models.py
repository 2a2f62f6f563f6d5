"""Pydantic v2 models for profiles, the shop, missions, teams and agents."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


class CharacterClass(str, Enum):
    OCULTISTA = "Ocultista"
    ESPECIALISTA = "Especialista"
    COMBATENTE = "Combatente"


class ItemType(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    QUEST = "quest"
    OTHER = "other"


class ItemRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


# Scarcity order, most common first
ITEM_RARITY_ORDER: dict[ItemRarity, int] = {r: i for i, r in enumerate(ItemRarity)}


class AgentRarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class MissionDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    LEGENDARY = "legendary"


class MissionStatus(str, Enum):
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"


class TeamRole(str, Enum):
    LEADER = "leader"
    MEMBER = "member"


# --- Session ---


class Session(BaseModel):
    """Who is acting. Passed explicitly into every service call."""

    user_id: str
    email: str = ""
    is_master: bool = False


# --- Profiles ---


class Item(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    type: ItemType = ItemType.OTHER
    rarity: ItemRarity = ItemRarity.COMMON
    description: str = ""
    quantity: int = Field(default=1, ge=1)
    damage: int | None = None
    defense: int | None = None

    def stacks_with(self, other: Item | ShopItem) -> bool:
        return (
            self.name == other.name
            and self.type == other.type
            and self.rarity == other.rarity
        )


class Skill(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    description: str = ""


class Profile(BaseModel):
    id: str
    user_id: str
    email: str = ""
    username: str = Field(min_length=1, max_length=64)
    char_class: str = Field(min_length=1, max_length=64)
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    health: int = 20
    max_health: int = 20
    mana: int | None = None
    max_mana: int | None = None
    strength: int = Field(default=10, ge=1, le=20)
    dexterity: int = Field(default=10, ge=1, le=20)
    constitution: int = Field(default=10, ge=1, le=20)
    intelligence: int = Field(default=10, ge=1, le=20)
    wisdom: int = Field(default=10, ge=1, le=20)
    charisma: int = Field(default=10, ge=1, le=20)
    creature_kills: int = Field(default=0, ge=0)
    player_kills: int = Field(default=0, ge=0)
    deaths: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    inventory: list[Item] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    faction: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_master: bool = False
    is_deceased: bool = False
    cause_of_death: str | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


# --- Shop ---


class ShopItem(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=128)
    description: str = ""
    type: ItemType = ItemType.OTHER
    rarity: ItemRarity = ItemRarity.COMMON
    price: int = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    damage: int | None = None
    defense: int | None = None
    image_url: str | None = None
    effect: str | None = None
    created_at: str = Field(default_factory=utc_now)

    def to_inventory_item(self, quantity: int) -> Item:
        """A fresh inventory entry; the catalog id is never reused."""
        return Item(
            name=self.name,
            type=self.type,
            rarity=self.rarity,
            description=self.description,
            quantity=quantity,
            damage=self.damage,
            defense=self.defense,
        )


# --- Missions ---


class MissionReward(BaseModel):
    experience: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)


class MissionRequirements(BaseModel):
    min_level: int | None = Field(default=None, ge=1)
    required_class: list[str] | None = None
    required_team: bool = False


class Mission(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(min_length=1, max_length=128)
    description: str = ""
    difficulty: MissionDifficulty = MissionDifficulty.EASY
    status: MissionStatus = MissionStatus.AVAILABLE
    reward: MissionReward = Field(default_factory=MissionReward)
    requirements: MissionRequirements | None = None
    accepted_by: list[str] = Field(default_factory=list)
    completed_by: list[str] = Field(default_factory=list)
    created_by: str
    created_by_name: str = ""
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def completed_implies_accepted(self) -> Mission:
        missing = set(self.completed_by) - set(self.accepted_by)
        if missing:
            raise ValueError(f"completed_by has users who never accepted: {sorted(missing)}")
        return self


# --- Teams ---


MIN_TEAM_SIZE = 2
MAX_TEAM_SIZE = 20


def clamp_team_size(max_members: int) -> int:
    return max(MIN_TEAM_SIZE, min(MAX_TEAM_SIZE, max_members))


class TeamMember(BaseModel):
    user_id: str
    username: str
    role: TeamRole = TeamRole.MEMBER
    joined_at: str = Field(default_factory=utc_now)


class Team(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=64)
    description: str = ""
    leader_id: str
    leader_name: str
    members: list[TeamMember] = Field(default_factory=list)
    max_members: int = Field(default=5, ge=MIN_TEAM_SIZE, le=MAX_TEAM_SIZE)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_membership(self) -> Team:
        leaders = [m for m in self.members if m.role == TeamRole.LEADER]
        if len(leaders) != 1 or leaders[0].user_id != self.leader_id:
            raise ValueError("A team needs exactly one leader, matching leader_id")
        if len(self.members) > self.max_members:
            raise ValueError(
                f"Team has {len(self.members)} members but allows {self.max_members}"
            )
        return self

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.max_members


# --- Agents ---


class AgentStats(BaseModel):
    strength: int = Field(default=5, ge=1, le=10)
    speed: int = Field(default=5, ge=1, le=10)
    endurance: int = Field(default=5, ge=1, le=10)
    intelligence: int = Field(default=5, ge=1, le=10)


class Agent(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=64)
    description: str = ""
    price: int = Field(ge=0)
    image_url: str = ""
    stats: AgentStats = Field(default_factory=AgentStats)
    special_ability: str = ""
    rarity: AgentRarity = AgentRarity.COMMON
    created_at: str = Field(default_factory=utc_now)


class RecruitedAgent(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_id: str
    profile_id: str
    agent_id: str
    agent_name: str
    agent_image: str = ""
    recruited_at: str = Field(default_factory=utc_now)
    level: int = 1
    experience: int = 0


# --- Ranking ---


class RankingEntry(BaseModel):
    """One row of any leaderboard, whichever query produced it."""

    profile_id: str
    user_id: str
    username: str
    char_class: str
    level: int
    creature_kills: int
    player_kills: int = 0
    deaths: int
    gold: int
    rank: int

    @classmethod
    def from_profile(cls, profile: Profile, rank: int) -> RankingEntry:
        return cls(
            profile_id=profile.id,
            user_id=profile.user_id,
            username=profile.username,
            char_class=profile.char_class,
            level=profile.level,
            creature_kills=profile.creature_kills,
            player_kills=profile.player_kills,
            deaths=profile.deaths,
            gold=profile.gold,
            rank=rank,
        )
