"""
Deterministic merge rules.

This file exists to keep every spelling, header variant and format the
pipeline recognizes in one place.
"""

TARGET_ENCODING = "utf-8"
CANDIDATE_DELIMITERS = (",", ";", "\t", "|")
DEFAULT_DELIMITER = ","

TRUE_SPELLINGS = frozenset({"true", "yes", "y", "1"})
FALSE_SPELLINGS = frozenset({"false", "no", "n", "0"})

ALLOWED_URL_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

# Join columns tried in order when --brand-key is not given (or not present).
BRAND_REF_CANDIDATES = ("brand_slug", "slug", "brand")

URL_COLUMNS = ("url", "URL", "Url")
TITLE_COLUMNS = ("Source Title", "title", "Title")

STATUS_COLUMN = "verification_status"
DATE_COLUMN = "last_verified"

# strptime formats tried after the numeric forms fail.
FALLBACK_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%a, %d %b %Y",
    "%a %b %d %Y",
)

OUTPUT_INDENT = 2
DRY_RUN_PREFIX = ".temp-"

DEFAULT_DATASET_PATH = "src/data/brands.json"
COVERAGE_LIST_LIMIT = 30
COVERAGE_GOOD = 80
COVERAGE_MODERATE = 50
