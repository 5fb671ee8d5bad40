"""Search quota policies.

Two policies exist and are kept separate on purpose:

- CounterQuotaPolicy: the persisted searchCount is compared against a threshold.
  With no threshold it only counts (every search is allowed and counted).
- SingleUseQuotaPolicy: the "has used the free search" gate. A user may search
  only while their searchCount is still 0.

A policy only decides; the user store calls check() inside its atomic
increment so the decision and the increment see the same count.
"""

from typing import Optional

from headcook.utils.config import config
from headcook.utils.errors import QuotaExceededError


class QuotaPolicy:
    """Decides whether a user with `search_count` past searches may search again."""

    name = "base"

    def allows(self, search_count: int) -> bool:
        raise NotImplementedError

    def check(self, search_count: int) -> None:
        """Raise QuotaExceededError if another search is not allowed."""
        if not self.allows(search_count):
            raise QuotaExceededError()


class CounterQuotaPolicy(QuotaPolicy):
    name = "counter"

    def __init__(self, limit: Optional[int] = None) -> None:
        """Initialize the policy.

        Args:
            limit: Maximum number of searches per identity. None or 0 means unlimited.
        """
        self.limit = limit or None

    def allows(self, search_count: int) -> bool:
        return self.limit is None or search_count < self.limit


class SingleUseQuotaPolicy(QuotaPolicy):
    name = "single-use"

    def allows(self, search_count: int) -> bool:
        return search_count == 0


def create_quota_policy(policy_name: Optional[str] = None, limit: Optional[int] = None) -> QuotaPolicy:
    """Build the configured policy (QUOTA_POLICY, SEARCH_LIMIT)."""
    policy_name = policy_name or config.QUOTA_POLICY
    if policy_name == "single-use":
        return SingleUseQuotaPolicy()
    if policy_name == "counter":
        return CounterQuotaPolicy(config.SEARCH_LIMIT if limit is None else limit)
    raise ValueError(f"Unknown quota policy: {policy_name}")
