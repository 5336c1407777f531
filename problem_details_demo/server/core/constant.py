"""Application-wide constants."""

PROJECT_NAME = "Problem Details Demo"

# Advice ordering: lower values take precedence.
HIGHEST_PRECEDENCE = -(2**31)
LOWEST_PRECEDENCE = 2**31 - 1

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
JSON_MEDIA_TYPE = "application/json"
HTML_MEDIA_TYPE = "text/html"

DEFAULT_PROBLEM_TYPE = "about:blank"
