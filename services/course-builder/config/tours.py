"""
Guided tour definitions served to the frontend.

Each journey is an ordered list of steps; the frontend attaches each step
to the element matching its CSS selector.
"""
from typing import Dict, List

from models.preview_models import TourStep


def _step(element: str, title: str, description: str, side: str, align: str = "center") -> TourStep:
    return TourStep(element=element, title=title, description=description, side=side, align=align)


# The curious newcomer (not logged in), home page part
NEWCOMER_STEPS: List[TourStep] = [
    _step(
        "#main-headline",
        "Welcome to CourseBuild!",
        "Ready to turn any YouTube video into an interactive course? Let's get started in just two clicks.",
        "bottom",
    ),
    _step(
        "#youtube-url-input",
        "Start Here",
        "Just paste any educational YouTube URL into this field. The AI works best with structured "
        "content like tutorials or lectures.",
        "top",
    ),
    _step(
        "#generate-course-button",
        "Generate Your Course",
        "Click here to let the AI work its magic. Our system will analyze the video, create a transcript, "
        "identify key concepts, and generate questions for you.",
        "top",
    ),
]

CREATION_STEPS: List[TourStep] = [
    _step(
        "#progress-tracker",
        "The AI at Work",
        "Our AI is now building your course! You're seeing our real-time pipeline at work, from planning "
        "and transcript generation to creating questions. This usually takes about 30 seconds.",
        "right",
    ),
]

PREVIEW_STEPS: List[TourStep] = [
    _step(
        "#course-preview-card",
        "Success! Your Course is Ready",
        "Here you can review the AI-generated segments and questions. Click \"Preview Course\" to start learning!",
        "left",
    ),
]

# The eager learner (first time logged in)
LEARNER_STEPS: List[TourStep] = [
    _step(
        "#interactive-video-player",
        "Your Interactive Player",
        "Welcome to your first course! This is more than just a video. As you watch, questions will appear "
        "at key moments to test your knowledge.",
        "bottom",
    ),
    _step(
        "#video-progress-bar",
        "Track Your Journey",
        "The dots on this progress bar mark where interactive questions will appear. You can click anywhere "
        "on the bar to jump to that part of the lesson.",
        "top",
    ),
    _step(
        "#video-player-area",
        "Ready for a Question?",
        "When a question appears, this card will flip over. After you answer, it will flip back to the "
        "video right where you left off.",
        "left",
    ),
    _step(
        "#transcript-display",
        "Follow Along!",
        "A live transcript of the video is displayed here. Click any segment to jump directly to that "
        "point in the video.",
        "top",
    ),
    _step(
        "#course-curriculum",
        "Your Course Outline",
        "See all the questions in this course. Green checkmarks show your progress. You can expand any "
        "question to review the explanation.",
        "left",
    ),
]

FEATURE_STEPS: List[TourStep] = [
    _step(
        "#generate-next-course",
        "Continue Learning",
        "Want more? Click here to generate a follow-up course based on the same video or topic.",
        "top",
        align="",
    ),
    _step(
        "#star-rating",
        "Rate Your Experience",
        "Help us improve! Rate this course to let us know how helpful it was.",
        "bottom",
        align="",
    ),
]

TOURS: Dict[str, List[TourStep]] = {
    "newcomer": NEWCOMER_STEPS,
    "creation": CREATION_STEPS,
    "preview": PREVIEW_STEPS,
    "learner": LEARNER_STEPS,
    "feature": FEATURE_STEPS,
}


def get_tour(journey: str) -> List[TourStep]:
    """Return the steps of a journey. Raises KeyError for unknown journeys."""
    return TOURS[journey.lower()]
