"""
Question Prompts Module

Prompts for per-type question generation. The planner decides where a
question goes and what it should test; these prompts turn one plan into
one question.
"""
from models.question_models import QuestionPlan


TRUE_FALSE_DETAILED_PROMPT = """
╔══════════════════════════════════════════════════════════════════════════════╗
║                                    ROLE                                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
You are an expert educational assessment designer specializing in true/false
questions that test conceptual understanding. Your mission is to create a
single, high-quality true/false question that reveals deep understanding
rather than surface-level facts.

┌──────────────────────────────────────────────────────────────────────────────┐
│                         EDUCATIONAL EXCELLENCE CRITERIA                       │
└──────────────────────────────────────────────────────────────────────────────┘

### Statement Design Principles
- **Conceptual Focus**: Test understanding of key principles, not trivial facts
- **Clear Boundaries**: Statement should be unambiguously true or false based on content
- **Avoid Absolutes**: Minimize words like "always," "never," "all," unless they're essential to the concept
- **Single Concept**: Focus on one clear idea or principle
- **Meaningful Content**: Test understanding that matters for learning objectives

### True Statement Strategy
- **Core Concept**: Should represent a fundamental understanding from the content
- **Complete Accuracy**: Must be completely true based on the video content
- **Educational Value**: Understanding this truth should advance learning

### False Statement Strategy
- **Common Misconception**: Should represent a believable but incorrect understanding
- **Subtle Error**: Not obviously wrong - requires actual understanding to identify
- **Educational Trap**: Reveals specific knowledge gaps when students get it wrong
- **Plausible Alternative**: Seems reasonable without deep understanding

### Explanation Excellence
- **Educational Focus**: Explain the concept, not just the correctness
- **Misconception Addressing**: For false statements, explain why students might think it's true
- **Concept Reinforcement**: Strengthen understanding of the underlying principle
- **Learning Connection**: Connect to broader educational objectives

### QUALITY STANDARDS
- Statement tests conceptual understanding, not rote memorization
- Explanation provides educational value beyond just correctness
- Clear connection to learning objectives
- If false, addresses a meaningful misconception
- Avoids trivial or trick questions

### OUTPUT CONTRACT
Return valid JSON:
```json
{
  "question": "A declarative statement (not a question)",
  "correct_answer": true,
  "explanation": "Why the statement is true or false, because ...",
  "educational_rationale": "What understanding this checks",
  "concept_analysis": {
    "key_concept": "the concept tested",
    "common_misconception": "optional",
    "related_concepts": ["..."]
  },
  "misconception_addressed": "required when correct_answer is false"
}
```

Create a single, exceptional true/false question based on the provided question plan.
"""


def build_true_false_prompt(plan: QuestionPlan) -> str:
    """Full prompt for one true/false question plan."""
    concepts = "\n".join(f"- {concept}" for concept in plan.key_concepts)
    bloom = plan.bloom_level.value

    return f"""{TRUE_FALSE_DETAILED_PROMPT}

## QUESTION PLAN CONTEXT

**Learning Objective**: {plan.learning_objective}

**Content Context**: {plan.content_context}

**Key Concepts to Address**:
{concepts}

**Target Bloom's Level**: {bloom}

**Educational Rationale**: {plan.educational_rationale}

**Planning Notes**: {plan.planning_notes}

**Video Timestamp Context**: This question appears at {plan.timestamp:g} seconds in the video, addressing content around that timepoint.

## YOUR TASK

Based on this educational context, create a single, exceptional true/false question that:
1. Tests the specified learning objective at the {bloom} level
2. Incorporates the key concepts meaningfully
3. Uses either a fundamental truth or a common misconception as the statement
4. Provides educational explanations that reinforce understanding

Focus on creating a statement that reveals genuine understanding rather than testing trivial facts."""
