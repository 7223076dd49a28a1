"""
Script Catalog

Read-only template data consumed by prompt composition:
- Base behavioral instructions for the model
- Guidance scripts and script selection
- "What if" helping questions per stage
- Request-type guidance
- Closing implementation practices

The wording is opaque template data; the rest of the system
only depends on the lookup contracts below.

CLINICAL_REVIEW_REQUIRED: All texts should be reviewed by an
MPT practitioner before changes.
"""

from dataclasses import dataclass
from typing import Optional

from mpt.domain.enums import MPTStage, RequestType
from mpt.domain.models import TherapyContext


BASE_MPT_PRINCIPLES: str = """IMPORTANT: Answer right away, without reasoning. Do NOT use <think> or </think> tags or any reasoning blocks. Write your answer to the client directly.

You are an experienced male MPT (Meta-Personal Therapy) therapist leading a psychological session. Always address the client informally. Never invent names.

## YOUR MAIN TASK:
You are NOT just interviewing the client. You LEAD them through the full structured MPT script. You do not give advice, analyze or interpret; you guide the client to discover their OWN resources and a new identity through questions.

## SESSION STRUCTURE (11 STAGES, STRICT ORDER):
1. Context  2. Request clarification (5 criteria)  3. Strategy exploration  4. Need discovery
5. Body work  6. Image creation  7. Becoming the image + movement  8. Meta-position
9. Integration through the body  10. New actions (SMART)  11. Implementation practices
Stages may NOT be skipped or mixed. Do not move on before the current stage is complete.

## BASIC PRINCIPLES:
1. Wholeness: everything the client talks about is a map of their inner reality.
2. Point of resolution: first clarify how the state after the resolution will feel.
3. Positive goal: every strategy serves a positive intention.
4. New identity: body sensation -> metaphor -> becoming it -> physical movement.
5. Returning authorship: immediately reframe victim phrasing into author phrasing.
6. Ending the conflict: do not eliminate body sensations, explore them.
7. Immediate implementation: always finish with a concrete SMART action and a practice.

## IF THE CLIENT SAYS "I DON'T KNOW / I DON'T FEEL / I DON'T UNDERSTAND":
That is normal. Use the "what if" technique. Never accept "I don't know" as a final answer.

## YOUR STYLE:
- Warm, accepting, professional.
- ASK AT MOST ONE QUESTION PER ANSWER.
- Short reflection (1-2 sentences) + 1 question. No long monologues.
- Do not use the words "problem", "trauma", "pathology".

## METHODOLOGICAL MARKUP:
Start EVERY answer with: **[Scenario: name | Stage: stage name]**

## UNCLEAR MESSAGES:
If the client writes gibberish, politely ask them to rephrase instead of inventing a meaning."""


@dataclass(frozen=True)
class MPTScript:
    """A guidance script tailored to one or more scenarios."""

    id: str
    name: str
    scenario_ids: tuple[str, ...]
    keywords: tuple[str, ...]
    focus: str


@dataclass(frozen=True)
class ImplementationPractice:
    """A closing practice offered in the terminal stage."""

    id: str
    name: str
    description: str


UNIVERSAL_SCRIPT = MPTScript(
    id="universal",
    name="Универсальный скрипт МПТ",
    scenario_ids=(),
    keywords=(),
    focus="Full 11-stage MPT algorithm without thematic specialization.",
)

MPT_SCRIPTS: tuple[MPTScript, ...] = (
    MPTScript(
        id="state-resource",
        name="Ресурсное состояние",
        scenario_ids=("burnout", "mood-swings"),
        keywords=("energy", "tired", "state", "энерги", "устал", "состояни"),
        focus="Find the resource state the client lacks and anchor it in the body.",
    ),
    MPTScript(
        id="fear-to-support",
        name="От страха к опоре",
        scenario_ids=("anxiety", "social"),
        keywords=("fear", "afraid", "scared", "страх", "боюсь", "тревог"),
        focus="Explore what the fear protects and find the support behind it.",
    ),
    MPTScript(
        id="projection",
        name="Работа с проекцией",
        scenario_ids=("anger", "loneliness", "parenting"),
        keywords=("he ", "she ", "they ", "partner", "boss", "он ", "она ", "партнер", "начальник"),
        focus="Return the quality seen in another person to the client: who in you shows this?",
    ),
    MPTScript(
        id="choice-point",
        name="Точка выбора",
        scenario_ids=("decisions", "crossroads"),
        keywords=("choose", "decide", "option", "выбор", "решить", "вариант"),
        focus="Explore the state behind each option and the need both options serve.",
    ),
    MPTScript(
        id="inner-authority",
        name="Внутренняя опора",
        scenario_ids=("inner-critic", "boundaries", "trauma", "loss", "psychosomatic"),
        keywords=("myself", "critic", "boundar", "себя", "критик", "границ"),
        focus="Turn the inner critic's energy into a supportive inner authority.",
    ),
    UNIVERSAL_SCRIPT,
)


REQUEST_TYPE_GUIDANCE: dict[RequestType, str] = {
    RequestType.EMOTIONAL_STATE: (
        "The client wants a different emotional state. Clarify how they want to feel instead "
        "and move toward the body sensation of that state."
    ),
    RequestType.DECISION: (
        "The client faces a choice. Do not choose for them: explore the need behind each option "
        "and the state they want to reach with either."
    ),
    RequestType.RELATIONSHIP: (
        "The request concerns another person. Work with projection: return the quality the "
        "client sees in the other person to the client."
    ),
    RequestType.BEHAVIOR_CHANGE: (
        "The client wants to stop or change a behavior. Explore the positive intention of the "
        "current behavior before looking for a new strategy."
    ),
    RequestType.GOAL_ACHIEVEMENT: (
        "The client wants to achieve a goal. Check the goal against the five criteria and find "
        "the state the goal is supposed to bring."
    ),
    RequestType.GENERAL: "",
}


HELPING_QUESTIONS: dict[MPTStage, str] = {
    MPTStage.CONTEXT_GATHERING: "And if you did know what is happening, what might it be?",
    MPTStage.REQUEST_VALIDATION: "And if you did know what you want, what could it be?",
    MPTStage.STRATEGY_EXPLORATION: "And if you did know what you do in this situation, what might it be?",
    MPTStage.NEED_DISCOVERY: "And if you did know what it would give you, what might that be?",
    MPTStage.SOMATIC_EXPLORATION: "And if you did feel it, what could this sensation be like?",
    MPTStage.IMAGERY_CREATION: "And if you did see an image, what might it be?",
    MPTStage.EMBODIMENT_MOVEMENT: "And if your body could move, how might it move?",
    MPTStage.META_PERSPECTIVE: "And if the image could see you, what might it notice?",
    MPTStage.INTEGRATION: "And if this energy were already in you, how might it feel?",
    MPTStage.NEW_ACTIONS: "And if you did know the first step, what might it be?",
    MPTStage.IMPLEMENTATION_PRACTICES: "And if one practice fit you best, which might it be?",
    MPTStage.FINISH: "And if you allowed yourself to imagine it, what might it be?",
}


IMPLEMENTATION_PRACTICES: tuple[ImplementationPractice, ...] = (
    ImplementationPractice(
        id="quick-switch",
        name="Quick switch",
        description="\"If I were {image}, how would this feel?\" Recall the image in any moment.",
    ),
    ImplementationPractice(
        id="morning-practice",
        name="Morning practice",
        description="Every morning: \"How would {image} live this day?\"",
    ),
    ImplementationPractice(
        id="moment-switch",
        name="In-the-moment switch",
        description="When you notice the habitual reaction: \"How would {image} act now?\"",
    ),
    ImplementationPractice(
        id="action-check",
        name="Action check",
        description="Take the concrete step and notice how your sensations change.",
    ),
)


class ScriptCatalog:
    """
    Lookup facade over the static template data.

    Injected into the orchestrator so alternative wording (e.g. another
    language) can be supplied without touching composition logic.
    """

    def __init__(
        self,
        base_instructions: str = BASE_MPT_PRINCIPLES,
        scripts: tuple[MPTScript, ...] = MPT_SCRIPTS,
    ) -> None:
        self._base_instructions = base_instructions
        self._scripts = scripts

    @property
    def base_instructions(self) -> str:
        return self._base_instructions

    def get_script_by_id(self, script_id: Optional[str]) -> Optional[MPTScript]:
        """Look up a script by id."""
        for script in self._scripts:
            if script.id == script_id:
                return script
        return None

    def select_best_script(self, message: str, scenario_id: Optional[str]) -> MPTScript:
        """
        Choose the guidance script for a conversation.

        Scenario match wins; otherwise the script with the most keyword
        hits (declaration order breaks ties); otherwise the universal script.
        """
        if scenario_id:
            for script in self._scripts:
                if scenario_id in script.scenario_ids:
                    return script

        text = (message or "").lower()
        best: Optional[MPTScript] = None
        best_score = 0
        for script in self._scripts:
            score = sum(1 for keyword in script.keywords if keyword in text)
            if score > best_score:
                best, best_score = script, score

        return best or UNIVERSAL_SCRIPT

    def helping_question(self, stage: MPTStage) -> str:
        """The "what if" question used when the client says they don't know."""
        return HELPING_QUESTIONS[stage]

    def request_type_guidance(self, request_type: RequestType) -> str:
        return REQUEST_TYPE_GUIDANCE.get(request_type, "")

    def select_homework(self, context: TherapyContext) -> ImplementationPractice:
        """
        Pick the closing practice from what the session produced.

        A chosen practice wins; a concrete step suggests the action check;
        an image suggests the quick switch; otherwise the morning practice.
        """
        if context.chosen_practice:
            for practice in IMPLEMENTATION_PRACTICES:
                if practice.id == context.chosen_practice:
                    return practice
        if context.next_step:
            return IMPLEMENTATION_PRACTICES[3]
        if context.metaphor:
            return IMPLEMENTATION_PRACTICES[0]
        return IMPLEMENTATION_PRACTICES[1]


def describe_practice(practice: ImplementationPractice, context: TherapyContext) -> str:
    """Practice description with the client's image filled in."""
    return practice.description.format(image=context.metaphor or "your image")
