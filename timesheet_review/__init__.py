"""Timesheet review core.

Authorization and approval logic for a workforce timesheet application:
role hierarchy, permission checks, team scope, week validation, the
approval state machine and bulk review.
"""

__version__ = "1.0.0"
