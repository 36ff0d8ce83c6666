from __future__ import annotations

# Idempotent CloudFormation read retry policy (per polling attempt)
QUERY_RETRY_ATTEMPTS = 3
QUERY_RETRY_DELAY_SECONDS = 1.0

# Event stream page size; one page is plenty between two polls
EVENTS_PAGE_SIZE = 100
