"""Contact form submissions."""

from mutuals.domain.submissions.service import SubmissionService

__all__ = ["SubmissionService"]
