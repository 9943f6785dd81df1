"""GitHub integration."""

from .client import GitHubClient, GitHubReviewSubmitter

__all__ = ["GitHubClient", "GitHubReviewSubmitter"]
