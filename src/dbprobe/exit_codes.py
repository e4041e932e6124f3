"""Exit codes for dbprobe.

The verification run has exactly two outcomes, so shell scripts and container
health checks only ever need to test for zero.

Usage:
    Always use named constants instead of raw integers:

    from dbprobe.exit_codes import EX_FAILED, EX_OK
    sys.exit(EX_FAILED)  # GOOD
    sys.exit(1)  # BAD - unclear meaning
"""

# Success
EX_OK = 0
"""Every required capability check passed."""

# Failure
EX_FAILED = 1
"""At least one required capability check failed.

Also returned when a check profile cannot be loaded, since no meaningful
verification can run without one. Scroll up in the report for the failing
lines (prefixed with ✗).
"""
