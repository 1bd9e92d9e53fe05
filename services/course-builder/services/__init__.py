"""
Course Builder Services
"""
from .segment_planner import SegmentPlan, PlannedSegment, plan_segments
from .segmented_processing import SegmentedProcessingService
from .video_analysis import VideoAnalysisService

__all__ = [
    "SegmentPlan",
    "PlannedSegment",
    "plan_segments",
    "SegmentedProcessingService",
    "VideoAnalysisService",
]
