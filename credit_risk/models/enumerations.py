from enum import Enum


class InputType(str, Enum):
    SELECT = "select"    # Pick one option
    YESNO = "yesno"      # Two-option select
    NUMBER = "number"    # Free numeric input on [0, 1]
    TEXT = "text"        # Free text, never scored
    RANGE = "range"      # Slider on [0, 1]


class Aggregation(str, Enum):
    SUM = "sum"
    AVG = "avg"
    MAX = "max"
    MIN = "min"


class EvaluationStatus(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"
    ARCHIVED = "archived"
