"""
Scenario Catalog

Static catalog of client request themes. Scenario detection scans
this tuple in declaration order, so order is the tie-break.

Keywords are lowercase substrings (English and Russian stems).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Scenario:
    """A request theme with its trigger keywords."""

    id: str
    name: str
    description: str
    keywords: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
        }


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        id="burnout",
        name="День сурка",
        description="Burnout, apathy, no energy; every day feels the same.",
        keywords=("burnout", "burned out", "burnt out", "apathy", "no energy", "exhausted",
                  "выгор", "апати", "нет сил", "нет энергии", "устал от всего"),
    ),
    Scenario(
        id="anxiety",
        name="Тревожный звоночек",
        description="Panic, anxiety, intrusive thoughts.",
        keywords=("anxious", "anxiety", "panic", "worried", "worry", "intrusive thought",
                  "тревог", "тревож", "паник", "беспоко", "навязчив"),
    ),
    Scenario(
        id="loneliness",
        name="Островок",
        description="Loneliness and difficulties in relationships.",
        keywords=("lonely", "loneliness", "alone", "no friends", "одинок", "одиночеств", "нет друзей"),
    ),
    Scenario(
        id="crossroads",
        name="Перекресток",
        description="Crisis of self-determination, search for meaning.",
        keywords=("meaning of life", "meaningless", "purpose", "who i am", "lost myself",
                  "смысл", "предназначени", "кто я", "потерял себя", "потеряла себя"),
    ),
    Scenario(
        id="trauma",
        name="Груз прошлого",
        description="Childhood trauma, toxic family.",
        keywords=("childhood", "trauma", "toxic family", "abuse", "детств", "травм", "токсичн"),
    ),
    Scenario(
        id="loss",
        name="После бури",
        description="Loss, divorce, grief.",
        keywords=("grief", "loss", "divorce", "passed away", "died", "горе", "утрат", "развод", "умер", "умерла"),
    ),
    Scenario(
        id="psychosomatic",
        name="Тело взывает о помощи",
        description="Psychosomatic symptoms.",
        keywords=("psychosomatic", "headache", "my body hurts", "pain in my", "психосоматик",
                  "болит", "головн", "боль в"),
    ),
    Scenario(
        id="inner-critic",
        name="Внутренний критик",
        description="Self-esteem, perfectionism.",
        keywords=("self-esteem", "self esteem", "perfectionis", "not good enough", "inner critic",
                  "самооценк", "перфекцион", "недостаточно хорош", "критику"),
    ),
    Scenario(
        id="anger",
        name="На взводе",
        description="Anger, irritability.",
        keywords=("anger", "angry", "irritat", "rage", "furious", "гнев", "злюсь", "злость", "раздраж", "бесит"),
    ),
    Scenario(
        id="boundaries",
        name="Без якоря",
        description="Boundaries, inability to say no.",
        keywords=("boundaries", "can't say no", "cannot say no", "people pleas",
                  "границ", "не могу отказать", "не умею говорить нет"),
    ),
    Scenario(
        id="decisions",
        name="Выбор без выбора",
        description="Decision paralysis.",
        keywords=("can't decide", "cannot decide", "decision", "choose between", "dilemma",
                  "не могу решить", "решени", "выбрать между", "выбор"),
    ),
    Scenario(
        id="parenting",
        name="Родительский квест",
        description="Parent-child relationships.",
        keywords=("my child", "my son", "my daughter", "parenting", "ребен", "ребён", "сын", "дочь", "дочк"),
    ),
    Scenario(
        id="social",
        name="В тени социума",
        description="Social anxiety.",
        keywords=("social anxiety", "shy", "public speaking", "people judge",
                  "стесня", "публичн", "социальн", "осужд"),
    ),
    Scenario(
        id="mood-swings",
        name="Эмоциональные качели",
        description="Unstable mood.",
        keywords=("mood swings", "mood changes", "emotional rollercoaster",
                  "перепады настроения", "качели", "настроение скачет"),
    ),
    Scenario(
        id="growth",
        name="Просто жизнь",
        description="Personal growth.",
        keywords=("personal growth", "grow", "develop myself", "potential",
                  "личностный рост", "развити", "расти", "потенциал"),
    ),
)


def get_scenario(scenario_id: Optional[str]) -> Optional[Scenario]:
    """Look up a scenario by id."""
    if not scenario_id:
        return None
    for scenario in SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return None


def scenario_catalog_list() -> list[dict]:
    """Catalog as served by the API, in declaration order."""
    return [s.to_dict() for s in SCENARIOS]
