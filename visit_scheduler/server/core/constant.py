"""Server-wide constants."""

PROJECT_NAME = "Visit Scheduler"
API_V1_STR = "/v1"
