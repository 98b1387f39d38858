from .vocab import VocabList, VocabItem
from .flashcard import Flashcard, Review, FLASHCARD_STATES
from .import_job import ImportJob, IMPORT_TERMINAL_STATUSES

__all__ = [
    "VocabList",
    "VocabItem",
    "Flashcard",
    "Review",
    "FLASHCARD_STATES",
    "ImportJob",
    "IMPORT_TERMINAL_STATUSES",
]
