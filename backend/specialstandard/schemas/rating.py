"""Rating vocabularies shared by session and student schemas."""

from enum import Enum


class RatingCategory(str, Enum):
    VISUAL_CUE = "visual_cue"
    VERBAL_CUE = "verbal_cue"
    GESTURAL_CUE = "gestural_cue"
    ENGAGEMENT = "engagement"


class RatingLevel(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    MAXIMAL = "maximal"
    LOW = "low"
    HIGH = "high"
