"""
The feedback flow as a transition table.

Each (step, message kind) pair maps to the step the user moves to and the
template the reply is rendered from. Rejections are marked with
``accepted=False``: the user is re-prompted and nothing is stored.
"""

from typing import Dict, NamedTuple, Tuple

from app.services.common.types import FeedbackStep, MessageKind, TemplateKey


class Transition(NamedTuple):
    next_step: FeedbackStep
    template: TemplateKey
    accepted: bool = True


def _reprompt(step: FeedbackStep, template: TemplateKey) -> Transition:
    return Transition(step, template, accepted=False)


GREETING = Transition(FeedbackStep.AWAITING_NAME, "greeting")

TRANSITIONS: Dict[Tuple[FeedbackStep, MessageKind], Transition] = {
    (FeedbackStep.AWAITING_NAME, "text"): Transition(
        FeedbackStep.AWAITING_FEEDBACK, "name_received"
    ),
    (FeedbackStep.AWAITING_NAME, "image"): _reprompt(
        FeedbackStep.AWAITING_NAME, "need_text"
    ),
    (FeedbackStep.AWAITING_NAME, "other"): _reprompt(
        FeedbackStep.AWAITING_NAME, "need_text"
    ),
    (FeedbackStep.AWAITING_FEEDBACK, "text"): Transition(
        FeedbackStep.AWAITING_IMAGE, "feedback_received"
    ),
    (FeedbackStep.AWAITING_FEEDBACK, "image"): _reprompt(
        FeedbackStep.AWAITING_FEEDBACK, "need_text"
    ),
    (FeedbackStep.AWAITING_FEEDBACK, "other"): _reprompt(
        FeedbackStep.AWAITING_FEEDBACK, "need_text"
    ),
    (FeedbackStep.AWAITING_IMAGE, "image"): Transition(
        FeedbackStep.COMPLETED, "completed"
    ),
    (FeedbackStep.AWAITING_IMAGE, "text"): _reprompt(
        FeedbackStep.AWAITING_IMAGE, "need_image"
    ),
    (FeedbackStep.AWAITING_IMAGE, "other"): _reprompt(
        FeedbackStep.AWAITING_IMAGE, "need_image"
    ),
}


def next_transition(step: FeedbackStep, kind: MessageKind) -> Transition:
    """
    Look up the transition for a message of ``kind`` arriving at ``step``.

    Steps with no outgoing transitions (COMPLETED) restart the flow.
    """
    return TRANSITIONS.get((step, kind), GREETING)
