"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure and access key format (DRY).
"""

# Cache key prefixes (used with :id etc.)
CACHE_PREFIX_ROLE = "role"
CACHE_PREFIX_USER = "user"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Access keys: XXXX-XXXX-XXXX over A-Z0-9
ACCESS_KEY_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ACCESS_KEY_LENGTH = 12
ACCESS_KEY_GROUP_SIZE = 4
ACCESS_KEY_SEPARATOR = "-"
ACCESS_KEY_MAX_INPUT_LENGTH = 50

# Capability unlocked by a key: lets a teacher create quizzes
CAPABILITY_TEACHER_QUIZ_CREATION = "TEACHER_QUIZ_CREATION"

# Order pricing estimate (VND per quiz)
SUBJECT_QUIZ_PRICE = 50_000
COURSE_QUIZ_PRICE = 100_000
MAX_ORDER_AMOUNT = 10_000_000

ROLE_REASON_MAX_LENGTH = 200
ORDER_NOTES_MAX_LENGTH = 500
