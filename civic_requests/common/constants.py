"""Application constants."""

USER_AGENT = "civic-requests/0.3 (+service-request-metrics)"

REQUIRED_FIELDS = ("unique_key", "request_type", "created_date", "closed_date")
OPTIONAL_FIELDS = ("latitude", "longitude")
ALL_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS

UNKNOWN_REQUEST_TYPE = "Unknown"
GENERATED_KEY_PREFIX = "gen_"
TURNAROUND_TOP_N = 10

# First data row sits on line 2 of the source file.
ROW_NUMBER_OFFSET = 2

COMMANDS = ("headers", "report", "analyze")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "session_id",
    "stage",
    "source",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
