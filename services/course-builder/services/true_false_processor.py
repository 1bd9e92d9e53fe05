"""
True/False Question Processor

Generates a single true/false question from a question plan. Statements
should test understanding of a key concept (true) or expose a common
misconception (false), never trivia.

Also provides the structural validation applied to every LLM response and
a heuristic quality score used by reviewers.
"""
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from shared.llm_provider import get_llm_client, get_llm_manager, get_model_name

from models.question_models import (
    BloomLevel,
    ConceptAnalysis,
    QualityAssessment,
    QuestionPlan,
    TrueFalseQuestion,
)
from prompts.question_prompts import build_true_false_prompt
from services.errors import QuestionGenerationError
from services.json_parser import RobustJSONParser


logger = logging.getLogger(__name__)

TRUE_FALSE_PROCESSOR_CONFIG: Dict[str, Any] = {
    "question_type": "true-false",
    "processor_name": "True/False Processor v4.0",
    "stage": 2,
    "requires_video_analysis": False,
    "supports": {
        "concept_analysis": True,
        "misconception_testing": True,
        "educational_explanations": True,
        "quality_assessment": True,
    },
}

TRUE_FALSE_GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.6,
    "max_tokens": 1500,
    "model_tier": "quality",
}

ABSOLUTE_TERMS = ["always", "never", "all", "none", "every", "only"]
TRIVIAL_INDICATORS = ["always", "never", "all", "none"]
EXPLANATORY_MARKERS = ["because", "therefore", "why"]


def _contains_any(text: str, words: List[str]) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def validate_true_false_structure(data: Any) -> List[str]:
    """
    Check the fields a true/false question needs.

    Raises ValueError on a structural problem; returns a list of soft
    warnings otherwise.
    """
    if not isinstance(data, dict):
        raise ValueError("Response must be a JSON object")

    question = data.get("question")
    if not isinstance(question, str) or len(question.strip()) < 10:
        raise ValueError("Question must be a non-empty string of at least 10 characters")

    if not isinstance(data.get("correct_answer"), bool):
        raise ValueError("correct_answer must be a boolean (true or false)")

    explanation = data.get("explanation")
    if not isinstance(explanation, str) or len(explanation.strip()) < 20:
        raise ValueError("Explanation must be a meaningful string of at least 20 characters")

    warnings = []
    if "?" in question:
        warnings.append("True/False should be statements, not questions")
    if _contains_any(question, ABSOLUTE_TERMS):
        warnings.append("Statement contains absolute terms - ensure this is educationally meaningful")
    if not any(marker in explanation.lower() for marker in EXPLANATORY_MARKERS):
        warnings.append("Explanation may lack educational depth - missing explanatory language")

    for warning in warnings:
        logger.warning(f"[TRUE_FALSE] {warning}")
    return warnings


def assess_true_false_quality(question: TrueFalseQuestion) -> QualityAssessment:
    """Heuristic score out of 100 with the reasons behind each deduction."""
    strengths: List[str] = []
    improvements: List[str] = []
    score = 100

    statement_length = len(question.question)
    if 15 <= statement_length <= 150:
        strengths.append("Statement length is appropriate")
    elif statement_length < 15:
        improvements.append("Statement could be more detailed")
        score -= 10
    else:
        improvements.append("Statement may be too complex for true/false format")
        score -= 5

    if len(question.explanation) >= 40:
        strengths.append("Explanation provides good educational value")
    else:
        improvements.append("Explanation could be more comprehensive")
        score -= 15

    if question.concept_analysis and question.concept_analysis.key_concept:
        strengths.append("Includes clear concept analysis")
    else:
        improvements.append("Could benefit from concept analysis")
        score -= 10

    if not question.correct_answer:
        if question.misconception_addressed:
            strengths.append("Addresses important misconception")
        else:
            improvements.append("False statement should address specific misconception")
            score -= 10

    if _contains_any(question.question, TRIVIAL_INDICATORS):
        improvements.append("Avoid absolute terms that might make question too obvious")
        score -= 5
    else:
        strengths.append("Avoids obvious absolute terms")

    if question.bloom_level in (BloomLevel.UNDERSTAND, BloomLevel.APPLY):
        strengths.append("Targets appropriate cognitive level for true/false format")
    elif question.bloom_level == BloomLevel.REMEMBER:
        improvements.append("Could target higher-order thinking")
        score -= 5

    return QualityAssessment(score=max(0, score), strengths=strengths, improvements=improvements)


class TrueFalseProcessor:
    """Generates true/false questions through the configured LLM provider"""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        provider_name: Optional[str] = None,
        json_mode: Optional[bool] = None,
    ):
        manager = None
        if client is None:
            manager = get_llm_manager()
            client = get_llm_client()
            provider_name = provider_name or manager.provider.value
            if json_mode is None:
                json_mode = manager.config.supports_json_mode
        self.client = client
        self._manager = manager
        self.model = model or get_model_name(TRUE_FALSE_GENERATION_CONFIG["model_tier"])
        self.provider_name = provider_name or "openai"
        self.json_mode = True if json_mode is None else json_mode
        self.parser = RobustJSONParser(client, repair_model=self.model)

    async def generate(self, plan: QuestionPlan) -> TrueFalseQuestion:
        logger.info(f"[TRUE_FALSE] Generating True/False: {plan.question_id}")
        logger.info(f"[TRUE_FALSE]   Learning Objective: {plan.learning_objective}")
        logger.info(f"[TRUE_FALSE]   Bloom Level: {plan.bloom_level.value}")
        logger.info(f"[TRUE_FALSE]   Key Concepts: {', '.join(plan.key_concepts)}")

        try:
            kwargs: Dict[str, Any] = {}
            if self.json_mode:
                kwargs["response_format"] = {"type": "json_object"}

            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_true_false_prompt(plan)}],
                temperature=TRUE_FALSE_GENERATION_CONFIG["temperature"],
                max_tokens=TRUE_FALSE_GENERATION_CONFIG["max_tokens"],
                **kwargs,
            )

            content = response.choices[0].message.content if response.choices else None
            if not content:
                raise ValueError("No content in LLM response")

            data = await self.parser.parse_with_llm_fallback(content)
            validate_true_false_structure(data)

            question = TrueFalseQuestion(
                question_id=plan.question_id,
                timestamp=plan.timestamp,
                question=data["question"],
                correct_answer=data["correct_answer"],
                explanation=data["explanation"],
                bloom_level=plan.bloom_level,
                educational_rationale=data.get("educational_rationale") or plan.educational_rationale,
                concept_analysis=ConceptAnalysis.model_validate(data.get("concept_analysis") or {}),
                misconception_addressed=data.get("misconception_addressed"),
            )
        except Exception as e:
            logger.error(f"[TRUE_FALSE] Generation failed for {plan.question_id}: {e}")
            raise QuestionGenerationError(
                f"True/False generation failed: {e}",
                plan.question_id,
                {"plan": plan.model_dump(mode="json"), "stage": "true_false_generation"},
            ) from e

        logger.info(
            f"[TRUE_FALSE] Generated successfully: {plan.question_id} (Provider: {self.provider_name})"
        )
        logger.info(f"[TRUE_FALSE]   Statement: {question.question[:60]}...")
        logger.info(f"[TRUE_FALSE]   Correct Answer: {question.correct_answer}")
        logger.info(
            f"[TRUE_FALSE]   Concept: {question.concept_analysis.key_concept or 'Not specified'}"
        )

        usage = getattr(response, "usage", None)
        if usage:
            logger.info(
                f"[TRUE_FALSE]   Token Usage: {usage.total_tokens} total "
                f"({usage.prompt_tokens} prompt, {usage.completion_tokens} completion)"
            )
            if self._manager:
                cost = self._manager.estimate_cost(usage.prompt_tokens, usage.completion_tokens)
                logger.info(f"[TRUE_FALSE]   Estimated cost: ${cost:.4f}")

        return question
