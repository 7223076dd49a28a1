"""
Stage Catalog

Static table describing every MPT stage: display names, purpose,
the sub-questions the therapist works through, and the guidance
block injected into the system instruction while the stage is active.

CLINICAL_REVIEW_REQUIRED: Question wording follows the MPT method
and should be reviewed by a practitioner before changes.
"""

from dataclasses import dataclass

from mpt.domain.enums import MPTStage, STAGE_ORDER


@dataclass(frozen=True)
class StageInfo:
    """
    Display and guidance metadata for one stage.

    Attributes:
        stage: Stage identifier
        name: English display name
        display_name: Client-facing (Russian) display name, used as phase label
        description: Purpose of the stage
        questions: Ordered sub-questions of the stage
        guidance: Instruction block for the model while in this stage
        min_responses: Client turns required when no explicit criterion exists
    """

    stage: MPTStage
    name: str
    display_name: str
    description: str
    questions: tuple[str, ...]
    guidance: str
    min_responses: int = 1

    def question_at(self, index: int) -> str:
        """Question at index, clamped to the last question."""
        if not self.questions:
            return ""
        return self.questions[min(max(index, 0), len(self.questions) - 1)]

    def to_dict(self) -> dict:
        return {
            "id": self.stage.value,
            "name": self.name,
            "russianName": self.display_name,
            "description": self.description,
            "questions": list(self.questions),
        }


STAGE_CONFIG: dict[MPTStage, StageInfo] = {
    MPTStage.CONTEXT_GATHERING: StageInfo(
        stage=MPTStage.CONTEXT_GATHERING,
        name="Context",
        display_name="Контекст",
        description="Understand what is happening and how important it is.",
        questions=(
            "Tell me, what is happening right now?",
            "How important is this for you on a scale from 1 to 10?",
        ),
        guidance=(
            "Understand the situation. Ask the client to rate its importance from 1 to 10. "
            "If the rating is below 8, look for a more meaningful context."
        ),
    ),
    MPTStage.REQUEST_VALIDATION: StageInfo(
        stage=MPTStage.REQUEST_VALIDATION,
        name="Request clarification",
        display_name="Уточнение запроса",
        description="Validate the request against the five criteria.",
        questions=(
            "What do you WANT instead?",
            "Does this depend on you? Where is your action in it?",
            "How will you know you have it? What will change?",
            "How realistic is this for you?",
            "How will you FEEL when you have it?",
        ),
        guidance=(
            "Check the request against all five criteria: positivity (what the client wants, "
            "not what they avoid), ownership (it depends on the client), specificity (how they "
            "will know), realism, and motivation (how they will feel). Do not move on until "
            "every criterion is confirmed."
        ),
    ),
    MPTStage.STRATEGY_EXPLORATION: StageInfo(
        stage=MPTStage.STRATEGY_EXPLORATION,
        name="Strategy exploration",
        display_name="Исследование стратегии",
        description="What the client DOES to create the situation and which task it solves.",
        questions=(
            "What do you DO to create this situation?",
            "What does it usually lead to?",
            "WHY do you do it? Which important task does it solve?",
            "What does this strategy HELP with? What is its constructive purpose?",
        ),
        guidance=(
            "Explore the client's strategy. The client must see that they are the author "
            "of it and that it serves a positive goal."
        ),
        min_responses=2,
    ),
    MPTStage.NEED_DISCOVERY: StageInfo(
        stage=MPTStage.NEED_DISCOVERY,
        name="Need discovery",
        display_name="Поиск потребности",
        description="Peel layers with circular questions down to the deep need.",
        questions=(
            "When you get it, what will it give you?",
            "And what stands BEHIND that?",
            "Is there something even DEEPER?",
            "Who will you FEEL yourself to be?",
        ),
        guidance=(
            "Use circular questions. Repeat until the client arrives at a formulation "
            "like \"I want to feel myself...\"."
        ),
    ),
    MPTStage.SOMATIC_EXPLORATION: StageInfo(
        stage=MPTStage.SOMATIC_EXPLORATION,
        name="Body work",
        display_name="Телесная работа",
        description="Locate the need in the body and describe the sensation completely.",
        questions=(
            "Where in your body do you feel this need?",
            "What SIZE is this sensation?",
            "What SHAPE is it?",
            "How DENSE is it? Dense, light, loose, flowing?",
            "What TEMPERATURE is it? Warm, cold, neutral?",
            "Is there MOVEMENT in it? Where is it directed?",
        ),
        guidance=(
            "Ask for every characteristic of the sensation: size, shape, density, "
            "temperature and movement. Only after the full description move on to the image."
        ),
    ),
    MPTStage.IMAGERY_CREATION: StageInfo(
        stage=MPTStage.IMAGERY_CREATION,
        name="Image creation",
        display_name="Создание образа",
        description="Turn the body sensation into an image or metaphor.",
        questions=(
            "If this sensation could become an IMAGE, what would it be like?",
            "Describe this image. What does it look like?",
            "How much ENERGY is in it?",
            "If you could BECOME this image completely, how would you feel?",
        ),
        guidance="Help the client create an image from the body sensation.",
    ),
    MPTStage.EMBODIMENT_MOVEMENT: StageInfo(
        stage=MPTStage.EMBODIMENT_MOVEMENT,
        name="Becoming the image",
        display_name="Становление образом",
        description="Become the image and let a movement emerge.",
        questions=(
            "Imagine you are this image now. Become it completely.",
            "Which MOVEMENT wants to be born from this?",
            "What changed in your sensations? Is this movement enough, or do you want more?",
        ),
        guidance=(
            "Invite the client to become the image and let a movement emerge. "
            "Always check whether the movement feels complete."
        ),
    ),
    MPTStage.META_PERSPECTIVE: StageInfo(
        stage=MPTStage.META_PERSPECTIVE,
        name="Meta-position",
        display_name="Метапозиция",
        description="Look at the client's life and strategy through the eyes of the image.",
        questions=(
            "Being this image, look at yourself. How do you see this person?",
            "How does their HABITUAL STRATEGY look from your position?",
            "What do they NOT SEE that is obvious to you?",
            "What MESSAGE do you want to give them?",
        ),
        guidance=(
            "Ask every meta-position question: the view of the client's life, their strategy, "
            "and the image's message."
        ),
    ),
    MPTStage.INTEGRATION: StageInfo(
        stage=MPTStage.INTEGRATION,
        name="Integration",
        display_name="Интеграция",
        description="Integrate the image's energy through the body.",
        questions=(
            "If this energy flowed freely through you, how would it feel?",
            "If it expressed itself through your BODY, how would it MOVE?",
            "What changed in your body now?",
        ),
        guidance="Offer a physical movement to integrate the energy and ask what changed.",
    ),
    MPTStage.NEW_ACTIONS: StageInfo(
        stage=MPTStage.NEW_ACTIONS,
        name="New actions",
        display_name="Новые действия",
        description="One concrete SMART step for the next 24 hours.",
        questions=(
            "From this new state, how can you act differently?",
            "Which ONE CONCRETE STEP are you ready to take in the next 24 hours?",
            "WHEN will you do it, and HOW will you know you did it?",
        ),
        guidance="Shape one concrete step: what exactly, when, and how the client will know it is done.",
    ),
    MPTStage.IMPLEMENTATION_PRACTICES: StageInfo(
        stage=MPTStage.IMPLEMENTATION_PRACTICES,
        name="Implementation practices",
        display_name="Практики внедрения",
        description="Choose a practice that anchors the result.",
        questions=("Which practice would you like to choose to anchor the result?",),
        guidance=(
            "Offer a choice of practices: quick switch, morning practice, "
            "in-the-moment switch, or action check."
        ),
    ),
    MPTStage.FINISH: StageInfo(
        stage=MPTStage.FINISH,
        name="Closing",
        display_name="Завершение",
        description="Summarize the session and thank the client.",
        questions=(),
        guidance=(
            "Close the session: thank the client and summarize the deep need, the image, "
            "the meta-position insight and the first step."
        ),
    ),
}


def get_stage_info(stage: MPTStage) -> StageInfo:
    """Metadata of a stage."""
    return STAGE_CONFIG[stage]


def get_phase_from_stage(stage: MPTStage) -> str:
    """Human-readable phase label for a stage."""
    return STAGE_CONFIG[stage].display_name


def next_stage(stage: MPTStage) -> MPTStage:
    """Stage following ``stage`` in canonical order; FINISH maps to itself."""
    index = STAGE_ORDER.index(stage)
    if index + 1 >= len(STAGE_ORDER):
        return stage
    return STAGE_ORDER[index + 1]


def stage_catalog_dict() -> dict[str, dict]:
    """Catalog keyed by stage id, in canonical order."""
    return {stage.value: STAGE_CONFIG[stage].to_dict() for stage in STAGE_ORDER}
