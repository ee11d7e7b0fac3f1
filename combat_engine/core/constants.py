"""
Constants and enumerations for the combat engine.

Defines the closed enumerations shared across the engine: combatant sides,
elements and their matchup chart, monster tiers, stat kinds, status effect
types, ability triggers and effect kinds, AI actions, battle phases,
difficulty levels and companion moods.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class Side(NiceEnum):
    """Defines which side of the battle a combatant fights for."""

    PLAYER = "player"
    COMPANION = "companion"
    ENEMY = "enemy"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this side."""
        return {
            Side.PLAYER: "👤",
            Side.COMPANION: "🤝",
            Side.ENEMY: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this side."""
        return {
            Side.PLAYER: "bold blue",
            Side.COMPANION: "bold green",
            Side.ENEMY: "bold red",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies side color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def is_opponent(self, other: "Side") -> bool:
        """Players and companions fight together against enemies."""
        return (self == Side.ENEMY) != (other == Side.ENEMY)


class Element(NiceEnum):
    """Defines the elemental affinity of a combatant."""

    NORMAL = "normal"
    FIRE = "fire"
    WATER = "water"
    EARTH = "earth"
    WIND = "wind"
    LIGHT = "light"
    DARK = "dark"

    @property
    def color(self) -> str:
        """Returns the color string associated with this element."""
        return {
            Element.FIRE: "bold red",
            Element.WATER: "bold blue",
            Element.EARTH: "yellow",
            Element.WIND: "bold green",
            Element.LIGHT: "bold white",
            Element.DARK: "magenta",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return f"[{self.color}]{self.display_name}[/]"

    def is_strong_against(self, other: "Element") -> bool:
        return other in ELEMENT_STRENGTHS[self]

    def is_weak_against(self, other: "Element") -> bool:
        return other in ELEMENT_WEAKNESSES[self]


ELEMENT_STRENGTHS: dict[Element, frozenset[Element]] = {
    Element.NORMAL: frozenset(),
    Element.FIRE: frozenset({Element.EARTH, Element.WIND}),
    Element.WATER: frozenset({Element.FIRE}),
    Element.EARTH: frozenset({Element.WATER, Element.WIND}),
    Element.WIND: frozenset({Element.EARTH}),
    Element.LIGHT: frozenset({Element.DARK}),
    Element.DARK: frozenset({Element.LIGHT}),
}

ELEMENT_WEAKNESSES: dict[Element, frozenset[Element]] = {
    Element.NORMAL: frozenset(),
    Element.FIRE: frozenset({Element.WATER}),
    Element.WATER: frozenset({Element.EARTH, Element.WIND}),
    Element.EARTH: frozenset({Element.FIRE}),
    Element.WIND: frozenset({Element.FIRE, Element.WATER}),
    Element.LIGHT: frozenset(),
    Element.DARK: frozenset(),
}


class Tier(NiceEnum):
    """Monster power classification."""

    COMMON = "common"
    ELITE = "elite"
    BOSS = "boss"
    LEGENDARY = "legendary"

    @property
    def is_boss(self) -> bool:
        return self in (Tier.BOSS, Tier.LEGENDARY)


class StatKind(NiceEnum):
    """Closed set of numeric stats a combatant carries."""

    HP = "hp"
    MAX_HP = "max_hp"
    MP = "mp"
    MAX_MP = "max_mp"
    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"
    CRIT_RATE = "crit_rate"
    CRIT_DAMAGE = "crit_damage"
    DODGE = "dodge"
    ACCURACY = "accuracy"


# Stats that buffs and debuffs are allowed to scale.
MODIFIABLE_STATS: frozenset[StatKind] = frozenset(
    {
        StatKind.ATTACK,
        StatKind.DEFENSE,
        StatKind.SPEED,
        StatKind.CRIT_RATE,
        StatKind.CRIT_DAMAGE,
        StatKind.DODGE,
        StatKind.ACCURACY,
    }
)


class EffectType(NiceEnum):
    """Defines the kinds of timed status effects."""

    POISON = "poison"
    BURN = "burn"
    FREEZE = "freeze"
    STUN = "stun"
    BUFF = "buff"
    DEBUFF = "debuff"
    REGENERATION = "regeneration"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return {
            EffectType.POISON: "🧪",
            EffectType.BURN: "🔥",
            EffectType.FREEZE: "❄️",
            EffectType.STUN: "💫",
            EffectType.BUFF: "⬆️",
            EffectType.DEBUFF: "⬇️",
            EffectType.REGENERATION: "💚",
        }.get(self, "❔")

    @property
    def is_damage_over_time(self) -> bool:
        return self in (EffectType.POISON, EffectType.BURN)

    @property
    def is_incapacitating(self) -> bool:
        return self in (EffectType.FREEZE, EffectType.STUN)

    @property
    def is_modifier(self) -> bool:
        return self in (EffectType.BUFF, EffectType.DEBUFF)


class EffectCategory(NiceEnum):
    """Whether a status effect helps or hinders its bearer."""

    BUFF = "buff"
    DEBUFF = "debuff"


class TickPhase(NiceEnum):
    """The two points of a turn at which the status ledger is updated."""

    START = "start"
    END = "end"


class Trigger(NiceEnum):
    """Defines the events that can fire a special ability."""

    ON_TURN_START = "onTurnStart"
    ON_TURN_END = "onTurnEnd"
    ON_ATTACK = "onAttack"
    ON_HIT = "onHit"
    ON_CRIT = "onCrit"
    ON_BELOW_HALF_HP = "onBelowHalfHp"
    ALWAYS = "always"


class EffectSpecType(NiceEnum):
    """Defines what a single step of an ability does."""

    DAMAGE = "damage"
    HEAL = "heal"
    STATUS_APPLY = "statusApply"
    BUFF = "buff"
    DEBUFF = "debuff"
    LIFE_DRAIN = "lifeDrain"
    MULTI_HIT = "multiHit"


class EffectTarget(NiceEnum):
    """Defines who a single step of an ability is aimed at."""

    SELF = "self"
    PLAYER = "player"
    ENEMY = "enemy"
    ALL_OPPONENTS = "allOpponents"


class ActionKind(NiceEnum):
    """Defines the actions a combatant can take on its turn."""

    ATTACK = "attack"
    SKILL = "skill"
    DEFEND = "defend"
    ITEM = "item"
    ESCAPE = "escape"

    @property
    def color(self) -> str:
        """Returns the color string associated with this action."""
        return {
            ActionKind.ATTACK: "bold red",
            ActionKind.SKILL: "bold magenta",
            ActionKind.DEFEND: "bold cyan",
            ActionKind.ITEM: "bold green",
            ActionKind.ESCAPE: "bold yellow",
        }.get(self, "dim white")


class TargetPriority(NiceEnum):
    """Defines how an AI pattern chooses its target."""

    LOWEST_HP = "lowest_hp"
    HIGHEST_DAMAGE = "highest_damage"
    RANDOM = "random"


class BattlePhase(NiceEnum):
    """Defines the lifecycle states of a battle."""

    PREPARATION = "preparation"
    BATTLE = "battle"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ESCAPED = "escaped"

    @property
    def is_terminal(self) -> bool:
        return self in (BattlePhase.VICTORY, BattlePhase.DEFEAT, BattlePhase.ESCAPED)

    @property
    def color(self) -> str:
        """Returns the color string associated with this phase."""
        return {
            BattlePhase.VICTORY: "bold green",
            BattlePhase.DEFEAT: "bold red",
            BattlePhase.ESCAPED: "bold yellow",
        }.get(self, "dim white")


class Difficulty(NiceEnum):
    """Defines the difficulty selected for a battle."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    NIGHTMARE = "nightmare"


class Mood(NiceEnum):
    """Defines the mood of a companion."""

    HAPPY = "happy"
    NORMAL = "normal"
    SAD = "sad"
    TIRED = "tired"
    HUNGRY = "hungry"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this mood."""
        return {
            Mood.HAPPY: "😊",
            Mood.NORMAL: "😐",
            Mood.SAD: "😢",
            Mood.TIRED: "😴",
            Mood.HUNGRY: "🍖",
        }.get(self, "❔")


class LogType(NiceEnum):
    """Defines the kinds of entries written to the combat log."""

    PHASE = "phase"
    DAMAGE = "damage"
    CRITICAL = "critical"
    DODGE = "dodge"
    HEAL = "heal"
    STATUS = "status"
    STATUS_TICK = "status_tick"
    STATUS_EXPIRED = "status_expired"
    SKIP = "skip"
    ABILITY = "ability"
    SKILL = "skill"
    DEFEND = "defend"
    ITEM = "item"
    ESCAPE = "escape"
    ESCAPE_DECLINED = "escape_declined"
    BOSS_PHASE = "boss_phase"
    DEFEATED = "defeated"
    INVALID = "invalid"
    COMPANION = "companion"
