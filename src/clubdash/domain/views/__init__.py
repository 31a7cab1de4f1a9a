"""View models for service outputs."""

from clubdash.domain.views.dashboard import (
    MemberStats,
    BirthdayView,
    DistributionItem,
    LoadState,
    BalanceRow,
    BalancePage,
    AccountSummary,
)

__all__ = [
    "MemberStats",
    "BirthdayView",
    "DistributionItem",
    "LoadState",
    "BalanceRow",
    "BalancePage",
    "AccountSummary",
]
