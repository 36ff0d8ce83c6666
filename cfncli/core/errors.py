"""Process exit codes.

Every way an invocation can end maps to one of these codes. The values are
part of the command-line contract and must stay stable:
- 0: The stack reached a successful terminal state
- 1: User error (conflicting or invalid options)
- 2: Environment error (bad config file)
- 3: Deployment failed (rejected request or failed stack)
- 4: Network error (queries kept failing)
- 5: I/O error (an @file option could not be read)
- 6: Timed out waiting for a terminal state
- 7: Nothing to update and --fail-on-noop was set
- 130: Cancelled by the user
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for cfncli commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    DEPLOY_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    TIMEOUT = 6
    NOOP = 7
    CANCELLED = 130
