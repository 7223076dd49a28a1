"""
Text Classifiers

Deterministic, rule-based classifiers over client turns:
scenario, request type, "I don't know", client name, importance
rating and victim-voice phrasing.

All matching is case-insensitive substring or pattern matching.
No classifier raises on odd input; absence of a pattern is a normal
None/default result.

CLINICAL_REVIEW_REQUIRED: Cue lists should be reviewed together
with the prompt templates they feed.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Union

from mpt.domain.enums import RequestType
from mpt.services.catalog.scenario_catalog import SCENARIOS, Scenario


HistoryItem = Union[Mapping[str, str], str]


def normalize(text: Optional[str]) -> str:
    """Lowercase and unify apostrophes and whitespace."""
    if not text:
        return ""
    text = text.replace("\u2019", "'").replace("\u02bc", "'").replace("ё", "е").replace("Ё", "Е")
    return re.sub(r"\s+", " ", text).strip().lower()


# =============================================================================
# SCENARIO
# =============================================================================

def detect_scenario(
    text: str,
    scenarios: Sequence[Scenario] = SCENARIOS,
) -> Optional[Scenario]:
    """
    Find the first scenario whose keyword occurs in the text.

    Catalog order is the tie-break: scenarios are scanned in
    declaration order and keywords within a scenario likewise.

    Args:
        text: Client message
        scenarios: Scenario catalog

    Returns:
        Matching scenario or None
    """
    lowered = normalize(text)
    if not lowered:
        return None

    for scenario in scenarios:
        for keyword in scenario.keywords:
            if normalize(keyword) in lowered:
                return scenario

    return None


# =============================================================================
# REQUEST TYPE
# =============================================================================

# Checked in order; first type with a matching cue wins
REQUEST_TYPE_CUES: tuple[tuple[RequestType, tuple[str, ...]], ...] = (
    (RequestType.EMOTIONAL_STATE, (
        "i feel", "feeling", "anxious", "anxiety", "sad", "afraid", "scared", "depressed",
        "lonely", "angry", "upset", "emotion",
        "чувству", "ощуща", "тревож", "тревог", "грустн", "страшно", "боюсь", "настроени", "эмоци",
    )),
    (RequestType.DECISION, (
        "decide", "decision", "choose", "choice", "should i", "whether to",
        "решить", "решени", "выбрать", "выбор", "стоит ли",
    )),
    (RequestType.RELATIONSHIP, (
        "relationship", "husband", "wife", "partner", "boyfriend", "girlfriend",
        "mother", "father", "my mom", "my dad", "colleague",
        "отношени", "муж", "жена", "партнер", "парень", "девушк", "мама", "отец", "коллег",
    )),
    (RequestType.BEHAVIOR_CHANGE, (
        "stop ", "quit", "habit", "procrastinat", "keep doing", "can't stop",
        "перестать", "бросить", "привычк", "прокрастин", "не могу остановиться",
    )),
    (RequestType.GOAL_ACHIEVEMENT, (
        "goal", "achieve", "earn", "succeed", "success", "get promoted",
        "цель", "достичь", "добиться", "заработать", "успех",
    )),
)


def detect_request_type(text: str) -> RequestType:
    """
    Classify the kind of goal the client brings.

    Returns:
        First request type (in table order) with a matching cue,
        or RequestType.GENERAL
    """
    lowered = normalize(text)
    for request_type, cues in REQUEST_TYPE_CUES:
        if any(cue in lowered for cue in cues):
            return request_type
    return RequestType.GENERAL


# =============================================================================
# "I DON'T KNOW"
# =============================================================================

I_DONT_KNOW_PHRASES: frozenset[str] = frozenset({
    "i don't know", "i dont know", "i do not know", "don't know", "dont know",
    "no idea", "not sure", "i'm not sure",
    "i don't feel", "i dont feel", "i can't feel", "i cant feel",
    "i don't understand", "i dont understand", "i do not understand",
    "не знаю", "незнаю", "без понятия", "понятия не имею",
    "не чувствую", "не ощущаю", "не понимаю",
})


def detect_i_dont_know(text: str) -> bool:
    """True if the text contains any "don't know / feel / understand" variant."""
    lowered = normalize(text)
    return any(phrase in lowered for phrase in I_DONT_KNOW_PHRASES)


# =============================================================================
# CLIENT NAME
# =============================================================================

_NAME = r"([^\W\d_][\w'-]*)"
_CAPITALIZED_NAME = r"([A-ZА-ЯЁ][\w'-]*)"

# Explicit introductions accept any case; "I am X" forms need a capitalized word
NAME_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(?i:\bmy name is)\s+" + _NAME),
    re.compile(r"(?i:\bcall me)\s+" + _NAME),
    re.compile(r"(?i:меня зовут)\s+" + _NAME),
    re.compile(r"(?i:мое имя|моё имя)\s*[-—:]?\s*" + _NAME),
    re.compile(r"(?i:\bi am|\bi'm|\bim)\s+" + _CAPITALIZED_NAME),
    re.compile(r"(?i:(?<!\w)я)\s*[-—]\s*" + _CAPITALIZED_NAME),
)

NOT_A_NAME: frozenset[str] = frozenset({
    "not", "so", "very", "really", "just", "here", "ok", "okay", "fine", "tired",
    "sorry", "afraid", "going", "scared", "feeling", "a", "an", "the", "always",
    "never", "still", "also", "trying", "anxious", "sad", "lost", "stuck", "i",
    "не", "очень", "просто", "тут", "здесь",
})


def _user_turns(history: Iterable[HistoryItem]) -> list[str]:
    turns = []
    for item in history:
        if isinstance(item, str):
            turns.append(item)
        elif item.get("role") == "user":
            turns.append(item.get("content") or "")
    return turns


def extract_client_name(history: Iterable[HistoryItem]) -> Optional[str]:
    """
    Find the name the client introduced themselves with.

    Scans user turns in order and returns the first self-introduction.
    The returned name is always a literal substring of the history;
    no match means no name.

    Args:
        history: Messages as {"role", "content"} mappings, or plain user strings

    Returns:
        Name as written by the client, or None
    """
    for turn in _user_turns(history):
        if not turn:
            continue
        for pattern in NAME_PATTERNS:
            for match in pattern.finditer(turn):
                candidate = match.group(1).strip("'-")
                if candidate and candidate.lower() not in NOT_A_NAME:
                    return candidate
    return None


# =============================================================================
# IMPORTANCE RATING
# =============================================================================

_OUT_OF_TEN = re.compile(r"(?<!\d)(\d{1,2})\s*(?:/|из|out of|of)\s*10(?!\d)", re.I)
_RATING_CUE = re.compile(r"importan|\brat(?:e|ed|ing)\b|\bscale\b|\bscore\b|важн|оцен|шкал|балл", re.I)
_NUMBER = re.compile(r"(?<!\d)(\d{1,2})(?!\d)")
_BARE_NUMBER = re.compile(r"^\s*(\d{1,2})\s*[.!]?\s*$")

# Characters around a cue searched for the number
RATING_WINDOW_BEFORE = 25
RATING_WINDOW_AFTER = 40


def _in_range(value: int) -> Optional[int]:
    return value if 1 <= value <= 10 else None


def extract_importance_rating(text: str, expecting_rating: bool = False) -> Optional[int]:
    """
    Extract a 1-10 importance rating.

    Recognizes "N/10", "N out of 10", "N из 10", and a number near an
    importance/rating cue. When the therapist just asked for the rating
    (``expecting_rating``), a message consisting only of a number counts.

    Returns:
        Rating 1-10, or None if absent or out of range
    """
    if not text:
        return None

    match = _OUT_OF_TEN.search(text)
    if match:
        return _in_range(int(match.group(1)))

    for cue in _RATING_CUE.finditer(text):
        start = max(0, cue.start() - RATING_WINDOW_BEFORE)
        window = text[start:cue.end() + RATING_WINDOW_AFTER]
        number = _NUMBER.search(window)
        if number:
            return _in_range(int(number.group(1)))

    if expecting_rating:
        bare = _BARE_NUMBER.match(text)
        if bare:
            return _in_range(int(bare.group(1)))

    return None


# =============================================================================
# AUTHORSHIP
# =============================================================================

# (victim-voice pattern, author-voice reframing)
AUTHORSHIP_PATTERNS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"меня заставля|меня заставил|\bforced me\b|\bmade me\b|\bi was forced\b|\bi have to\b", re.I),
     "I ALLOWED... / I CHOSE to..."),
    (re.compile(r"на меня давит|на меня давят|\bpressur(?:e|es|ing) (?:on )?me\b|\bputs pressure on me\b", re.I),
     "I PUT PRESSURE on myself..."),
    (re.compile(r"меня обидел|меня обидели|\bhurt me\b|\boffended me\b", re.I),
     "I FELT HURT when..."),
    (re.compile(r"меня бесит|меня бесят|\bdrives me crazy\b|\bmakes me angry\b|\bannoys me\b", re.I),
     "I GET ANGRY when..."),
    (re.compile(r"живу не своей жизнью|\bnot living my own life\b|\bliving someone else's life\b", re.I),
     "I MAKE it so that I live not my own life..."),
    (re.compile(r"сижу в клетке|в клетке|\bin a cage\b|\btrapped\b", re.I),
     "I PUT myself in a cage..."),
    (re.compile(r"мне мешают|мне мешает|\bstop(?:s)? me\b|\bprevent(?:s)? me\b|\bin my way\b", re.I),
     "I MEET an obstacle when..."),
)


def transform_to_authorship(text: str) -> Optional[str]:
    """
    Suggest an author-voice reframing for victim-voice phrasing.

    Advisory text for the next system instruction; the client's
    message itself is never changed.

    Returns:
        Reframing note for the first matching pattern, or None
    """
    if not text:
        return None

    for pattern, reframing in AUTHORSHIP_PATTERNS:
        match = pattern.search(text)
        if match:
            return (
                f'The client said "{match.group(0)}" (victim position). '
                f'Gently return authorship with a reframing like: "{reframing}"'
            )
    return None


# =============================================================================
# AGGREGATE
# =============================================================================

@dataclass(frozen=True)
class TurnClassification:
    """
    Classifier outputs for one client turn.

    Attributes:
        says_i_dont_know: "I don't know" variant present
        client_name: Name found anywhere in the history
        importance_rating: Rating stated in this turn
        authorship_note: Reframing note for victim-voice phrasing
        scenario: Scenario matched by this turn
    """

    says_i_dont_know: bool = False
    client_name: Optional[str] = None
    importance_rating: Optional[int] = None
    authorship_note: Optional[str] = None
    scenario: Optional[Scenario] = None


def classify_turn(
    message: str,
    history: Iterable[HistoryItem],
    expecting_rating: bool = False,
) -> TurnClassification:
    """Run every per-turn classifier over a client message."""
    return TurnClassification(
        says_i_dont_know=detect_i_dont_know(message),
        client_name=extract_client_name(history),
        importance_rating=extract_importance_rating(message, expecting_rating=expecting_rating),
        authorship_note=transform_to_authorship(message),
        scenario=detect_scenario(message),
    )
