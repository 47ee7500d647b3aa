"""Models for persisted user preferences."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from prwatch.github.models import PRState
from prwatch.settings_store.exceptions import (
    InvalidFilterSettingsError,
    MalformedSettingsError,
)

if TYPE_CHECKING:
    from prwatch.github.models import PullRequest

DEFAULT_REFRESH_INTERVAL = 60
DEFAULT_COLLAPSED_READINESS_SECTIONS = frozenset({"not_ready"})


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class SettingEntry(Base):
    """One persisted preference, stored as JSON text under a key."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


@dataclass
class FilterSettings:
    """User policy for the review-requested list and readiness.

    Attributes:
        hide_drafts: Drop draft PRs from the review list.
        required_check_names: Checks that must pass for a PR to be ready.
        ignored_check_names: Checks excluded from every CI computation.
    """

    hide_drafts: bool = True
    required_check_names: list[str] = field(default_factory=list)
    ignored_check_names: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """Reject a check name that is both required and ignored.

        Raises:
            InvalidFilterSettingsError: If the two lists overlap.
        """
        overlap = set(self.required_check_names) & set(self.ignored_check_names)
        if overlap:
            names = ", ".join(sorted(overlap))
            raise InvalidFilterSettingsError(
                f"Checks cannot be both required and ignored: {names}"
            )

    def apply_review_filters(self, prs: list[PullRequest]) -> list[PullRequest]:
        """Filter the review list, removing drafts when configured."""
        if not self.hide_drafts:
            return list(prs)
        return [pr for pr in prs if pr.state != PRState.DRAFT]

    def to_dict(self) -> dict[str, Any]:
        return {
            "hide_drafts": self.hide_drafts,
            "required_check_names": list(self.required_check_names),
            "ignored_check_names": list(self.ignored_check_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterSettings:
        """Build settings from saved data, defaulting any missing key.

        Raises:
            MalformedSettingsError: If a present key holds the wrong type.
        """
        hide_drafts = data.get("hide_drafts", True)
        if not isinstance(hide_drafts, bool):
            raise MalformedSettingsError(f"hide_drafts must be a boolean: {hide_drafts!r}")
        return cls(
            hide_drafts=hide_drafts,
            required_check_names=_name_list(data, "required_check_names"),
            ignored_check_names=_name_list(data, "ignored_check_names"),
        )


def _name_list(data: dict[str, Any], key: str) -> list[str]:
    names = data.get(key, [])
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise MalformedSettingsError(f"{key} must be a list of strings: {names!r}")
    return list(names)
