IMPORT_ALLOWED_HEADERS = ("term", "definition", "partOfSpeech", "exampleSentence")
IMPORT_REQUIRED_HEADERS = ("term",)

MAX_IMPORT_FILE_SIZE_BYTES = 2 * 1024 * 1024
MAX_IMPORT_ROW_COUNT = 5000
MAX_TERM_LENGTH = 255
MAX_PART_OF_SPEECH_LENGTH = 32
MAX_TEXT_FIELD_LENGTH = 2000
MAX_ERROR_SAMPLE_SIZE = 20
MAX_LIST_NAME_LENGTH = 120
MAX_IDEMPOTENCY_KEY_LENGTH = 120

IMPORT_DEFAULT_PART_OF_SPEECH = "unknown"

IMPORT_ID_PREFIX = "imp_"
