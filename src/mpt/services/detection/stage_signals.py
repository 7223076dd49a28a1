"""
Stage Signals

Stage-scoped detectors that turn a client answer into structured
context: validation criteria, body location and descriptors, deep
need, metaphor, strategy, movement, integration shift, next step
and chosen practice.

Each detector only looks at a single message and is case-insensitive.
Returned strings are literal fragments of the message.
"""

import re
from typing import Optional

from mpt.services.detection.text_classifiers import normalize


def _match_any(patterns: tuple[re.Pattern, ...], text: str) -> bool:
    return any(p.search(text) for p in patterns)


NEGATION_WORDS: frozenset[str] = frozenset({
    "not", "no", "never", "nothing", "cannot", "hardly",
    "don't", "dont", "can't", "cant", "didn't", "doesn't", "isn't", "won't", "couldn't",
    "не", "нет", "ни", "ничего", "никак",
})
NEGATION_WINDOW = 3
_TOKEN = re.compile(r"[\w']+")
_CLAUSE_END = re.compile(r"[.!?;]")


def _negated(lowered: str, start: int) -> bool:
    """A negation word sits within a few tokens before ``start`` in the same sentence."""
    clause = _CLAUSE_END.split(lowered[:start])[-1]
    return any(token in NEGATION_WORDS for token in _TOKEN.findall(clause)[-NEGATION_WINDOW:])


def _affirmed_cue(lowered: str, cues: tuple[str, ...]) -> bool:
    """Some occurrence of a cue is not negated."""
    for cue in cues:
        start = lowered.find(cue)
        while start != -1:
            if not _negated(lowered, start):
                return True
            start = lowered.find(cue, start + 1)
    return False


def _clip(text: str, limit: int = 300) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[:limit].rstrip()


# =============================================================================
# REQUEST VALIDATION
# =============================================================================

REQUEST_CRITERIA_PATTERNS: dict[str, tuple[re.Pattern, ...]] = {
    "positivity": (
        re.compile(r"\bi want\b|\bi'd like\b|\bi would like\b|\bi wish\b", re.I),
        re.compile(r"(?<!не )хочу|хотел(?:а)? бы", re.I),
    ),
    "ownership": (
        re.compile(r"depends on me|up to me|my responsibility|\bi can\b|\bi will\b|\bi'll\b", re.I),
        re.compile(r"зависит от меня|в моих силах|я могу|я сделаю|от меня зависит", re.I),
    ),
    "specificity": (
        re.compile(r"i(?:'ll| will) (?:know|notice|see)|will change|\bwhen i\b", re.I),
        re.compile(r"пойму|замечу|увижу|изменится|когда я", re.I),
    ),
    "realism": (
        re.compile(r"\brealistic\b|\breal\b|\bpossible\b|\bachievable\b|\bdoable\b", re.I),
        re.compile(r"реальн|возможн|достижим|выполним", re.I),
    ),
    "motivation": (
        re.compile(r"i(?:'ll| will) feel|\bfeel (?:free|calm|happy|light|confident|good)", re.I),
        re.compile(r"почувству|буду чувствовать|буду ощущать", re.I),
    ),
}


def detect_request_criteria(text: str) -> set[str]:
    """Validation criteria the answer confirms."""
    if not text:
        return set()
    return {
        criterion
        for criterion, patterns in REQUEST_CRITERIA_PATTERNS.items()
        if _match_any(patterns, text)
    }


# =============================================================================
# STRATEGY / NEED
# =============================================================================

STRATEGY_CUES: tuple[re.Pattern, ...] = (
    re.compile(r"\bi (?:always|usually|often|keep|try|tend to|start|just)\b|\bi do\b", re.I),
    re.compile(r"я (?:всегда|обычно|часто|стараюсь|пытаюсь|начинаю|делаю)|обычно я", re.I),
)


def detect_strategy(text: str) -> Optional[str]:
    """The answer itself when it describes what the client does."""
    if text and _match_any(STRATEGY_CUES, text):
        return _clip(text)
    return None


DEEP_NEED_PATTERN = re.compile(
    r"(?:i want to feel|i'd like to feel|i would like to feel|"
    r"хочу (?:ощущать|чувствовать|почувствовать) себя|хочется (?:ощущать|чувствовать) себя)"
    r"[^.!?\n]*",
    re.I,
)


def detect_deep_need(text: str) -> Optional[str]:
    """The "I want to feel myself..." formulation, if present."""
    if not text:
        return None
    match = DEEP_NEED_PATTERN.search(text)
    return match.group(0).strip() if match else None


# =============================================================================
# BODY
# =============================================================================

# (pattern, canonical location), checked in order
BODY_LOCATIONS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\bsolar plexus\b|(?<!\w)солнечн\w*", re.I), "solar plexus"),
    (re.compile(r"\bchest\b|(?<!\w)груд\w*", re.I), "chest"),
    (re.compile(r"\bheart\b|(?<!\w)сердц\w*", re.I), "heart"),
    (re.compile(r"\bstomach\b|\bbelly\b|(?<!\w)живот\w*", re.I), "stomach"),
    (re.compile(r"\bthroat\b|(?<!\w)горл\w*", re.I), "throat"),
    (re.compile(r"\bshoulders?\b|(?<!\w)плеч\w*", re.I), "shoulders"),
    (re.compile(r"\bneck\b|(?<!\w)ше(?:я|е|ю|и)(?!\w)", re.I), "neck"),
    (re.compile(r"\bhead\b|(?<!\w)голов\w*", re.I), "head"),
    (re.compile(r"\bback\b|(?<!\w)спин\w*", re.I), "back"),
    (re.compile(r"\bhands?\b|\barms?\b|(?<!\w)рук\w*", re.I), "hands"),
    (re.compile(r"\blegs?\b|(?<!\w)ног(?:и|ах|е|у)?(?!\w)", re.I), "legs"),
)


def detect_body_location(text: str) -> Optional[str]:
    """Canonical body part named in the answer."""
    if not text:
        return None
    for pattern, canonical in BODY_LOCATIONS:
        if pattern.search(text):
            return canonical
    return None


SOMATIC_DESCRIPTOR_CUES: dict[str, tuple[str, ...]] = {
    "size": (
        "big", "small", "large", "huge", "tiny", "size", "fist", "palm", " cm",
        "больш", "маленьк", "размер", "огромн", "крошечн", "с кулак", "с ладонь",
    ),
    "shape": (
        "round", "ball", "square", "shape", "flat", "sphere", "circle", "oval", "like a stone",
        "кругл", "шар", "форм", "квадрат", "плоск", "овал", "круг",
    ),
    "density": (
        "dense", "heavy", "light", "loose", "solid", "fluid", "flowing", "soft", "hard",
        "плотн", "тяжел", "легк", "рыхл", "текуч", "мягк", "тверд",
    ),
    "temperature": (
        "warm", "cold", "hot", "cool", "neutral", "temperature",
        "тепл", "холод", "горяч", "прохлад", "нейтральн", "температур",
    ),
    "movement": (
        "moving", "moves", "pulsing", "pulsat", "spinning", "rotating", "still", "vibrat",
        "flows", "motionless", "static",
        "движ", "пульс", "вращ", "вибр", "неподвиж", "стоит на месте", "течет",
    ),
}


def detect_somatic_descriptors(text: str) -> set[str]:
    """Sensation descriptors the answer gives."""
    lowered = normalize(text)
    if not lowered:
        return set()
    return {
        descriptor
        for descriptor, cues in SOMATIC_DESCRIPTOR_CUES.items()
        if any(cue in lowered for cue in cues)
    }


# =============================================================================
# IMAGE / MOVEMENT / INTEGRATION
# =============================================================================

METAPHOR_PATTERN = re.compile(
    r"(?:it(?:'s| is) like|looks like|it(?:'s| is) a|like a|like an|feels like|"
    r"похож(?:е|а)? на|это как|как будто)\s+([^.!?,\n]+)",
    re.I,
)


def detect_metaphor(text: str) -> Optional[str]:
    """Image the client describes, if any."""
    if not text:
        return None
    match = METAPHOR_PATTERN.search(text)
    if not match:
        return None
    image = match.group(1).strip()
    return image or None


MOVEMENT_CUES: tuple[str, ...] = (
    "move", "moving", "sway", "stretch", "dance", "raise", "rais", "spread", "open my arms",
    "двига", "движени", "потянул", "потягива", "качаю", "танц", "подним", "раскрыва",
)


def detect_movement(text: str) -> bool:
    """The client reports making or feeling a movement."""
    return _affirmed_cue(normalize(text), MOVEMENT_CUES)


INTEGRATION_CUES: tuple[str, ...] = (
    "changed", "lighter", "calmer", "more calm", "better", "relaxed", "warmer", "freer",
    "изменил", "легче", "спокойн", "лучше", "расслаб", "свободн", "теплее",
)


def detect_integration_shift(text: str) -> bool:
    """The client reports a change in sensations."""
    lowered = normalize(text)
    if not lowered or "nothing changed" in lowered:
        return False
    return _affirmed_cue(lowered, INTEGRATION_CUES)


# =============================================================================
# NEW ACTIONS / PRACTICES
# =============================================================================

ACTION_CUES: tuple[re.Pattern, ...] = (
    re.compile(r"\bi(?:'ll| will| am going to|'m going to)\b", re.I),
    re.compile(r"я (?:сделаю|буду|позвоню|напишу|пойду|начну|схожу|поговорю)", re.I),
)

TIME_CUES: tuple[re.Pattern, ...] = (
    re.compile(r"\btoday\b|\btomorrow\b|\btonight\b|\bmorning\b|\bevening\b|\bat \d|\bby \d|\bmonday\b|\bweekend\b", re.I),
    re.compile(r"сегодня|завтра|утром|вечером|в \d|до \d|понедельник|выходны", re.I),
)


def detect_next_step(text: str) -> Optional[str]:
    """The answer itself when it names an action and a time."""
    if text and _match_any(ACTION_CUES, text) and _match_any(TIME_CUES, text):
        return _clip(text)
    return None


# (cue, practice id)
PRACTICE_CUES: tuple[tuple[str, str], ...] = (
    ("quick", "quick-switch"),
    ("быстр", "quick-switch"),
    ("morning", "morning-practice"),
    ("утрен", "morning-practice"),
    ("moment", "moment-switch"),
    ("момент", "moment-switch"),
    ("action", "action-check"),
    ("действи", "action-check"),
)

_PRACTICE_BY_NUMBER: dict[str, str] = {
    "1": "quick-switch",
    "2": "morning-practice",
    "3": "moment-switch",
    "4": "action-check",
}


def detect_chosen_practice(text: str) -> Optional[str]:
    """Practice id the client picks, by name or by list number."""
    lowered = normalize(text)
    if not lowered:
        return None
    for cue, practice_id in PRACTICE_CUES:
        if cue in lowered:
            return practice_id
    return _PRACTICE_BY_NUMBER.get(lowered.strip(" .!"))
