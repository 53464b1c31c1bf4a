"""
Кандидаты для упоминаний: пользователи (@) и тикеты (#).

Wire shapes follow the suggestion provider:
    user:   {"userName": str, "name": str, "id": ...}
    ticket: {"ticketName": str, "id": ...}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Union

from richdelta.exceptions import InvalidAttributeBundleError
from richdelta.model.enums import MentionType

MentionId = Union[str, int]


@dataclass(frozen=True, slots=True)
class UserCandidate:
    """A user that can be mentioned with ``@``."""

    mention_type: ClassVar[MentionType] = MentionType.USER

    id: MentionId
    user_name: str
    name: str

    @property
    def primary_name(self) -> str:
        """Text shown after the trigger."""
        return self.user_name

    @property
    def display(self) -> str:
        return self.name

    def to_dict(self) -> dict[str, Any]:
        user = MentionType.USER
        return {user.primary_key: self.user_name, user.display_key: self.name, "id": self.id}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "UserCandidate":
        user = MentionType.USER
        _require(data, (user.primary_key, "id"), user)
        user_name = str(data[user.primary_key])
        return UserCandidate(
            id=data["id"], user_name=user_name, name=str(data.get(user.display_key) or user_name)
        )


@dataclass(frozen=True, slots=True)
class TicketCandidate:
    """A ticket that can be mentioned with ``#``."""

    mention_type: ClassVar[MentionType] = MentionType.TICKET

    id: MentionId
    ticket_name: str

    @property
    def primary_name(self) -> str:
        return self.ticket_name

    @property
    def display(self) -> str:
        return self.ticket_name

    def to_dict(self) -> dict[str, Any]:
        return {MentionType.TICKET.primary_key: self.ticket_name, "id": self.id}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "TicketCandidate":
        ticket = MentionType.TICKET
        _require(data, (ticket.primary_key, "id"), ticket)
        return TicketCandidate(id=data["id"], ticket_name=str(data[ticket.primary_key]))


MentionCandidate = Union[UserCandidate, TicketCandidate]


def _require(data: Mapping[str, Any], keys: tuple[str, ...], mention_type: MentionType) -> None:
    if not isinstance(data, Mapping):
        raise InvalidAttributeBundleError(
            f"{mention_type.value} candidate must be a mapping, got {type(data).__name__}"
        )
    for key in keys:
        value = data.get(key)
        if value is None or value == "":
            raise InvalidAttributeBundleError(
                f"{mention_type.value} candidate is missing {key!r}", key=key
            )


def candidate_from_dict(data: Mapping[str, Any], mention_type: MentionType) -> MentionCandidate:
    """
    Build a candidate of ``mention_type`` from its wire mapping.

    Raises:
        InvalidAttributeBundleError: If a required key is missing or empty.
    """
    if mention_type is MentionType.USER:
        return UserCandidate.from_dict(data)
    return TicketCandidate.from_dict(data)


def as_candidate(descriptor: Any, mention_type: MentionType) -> MentionCandidate:
    """
    Normalize a descriptor (candidate object or wire mapping) for ``mention_type``.

    Raises:
        InvalidAttributeBundleError: If the descriptor does not fit the type.
    """
    if isinstance(descriptor, (UserCandidate, TicketCandidate)):
        if descriptor.mention_type is not mention_type:
            raise InvalidAttributeBundleError(
                f"Expected a {mention_type.value} candidate, "
                f"got {descriptor.mention_type.value}"
            )
        return descriptor
    return candidate_from_dict(descriptor, mention_type)


def primary_field(candidate: Mapping[str, Any] | MentionCandidate, mention_type: MentionType) -> str:
    """Searchable name of a candidate: ``userName`` for users, ``ticketName`` for tickets."""
    if isinstance(candidate, (UserCandidate, TicketCandidate)):
        return candidate.primary_name
    return str(candidate.get(mention_type.primary_key) or "")


__all__ = [
    "MentionId",
    "UserCandidate",
    "TicketCandidate",
    "MentionCandidate",
    "candidate_from_dict",
    "as_candidate",
    "primary_field",
]
