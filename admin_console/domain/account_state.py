"""Provider account status machine.

Block and Suspend both resolve to ``SUSPENDED`` on the backend; the provider
record has no separate blocked state. ``BLOCKED`` is still accepted as a
current status because it shows up on displayed data.
"""

from dataclasses import dataclass
from enum import Enum

from admin_console.core.exceptions import InvalidTransition


class ProviderStatus(str, Enum):
    """Provider account activity status."""

    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    BLOCKED = "BLOCKED"
    INACTIVE = "INACTIVE"
    UNKNOWN = "UNKNOWN"


class AccountAction(str, Enum):
    """Admin-triggered account actions."""

    BLOCK = "block"
    SUSPEND = "suspend"
    ACTIVATE = "activate"


class ConfirmationStyle(str, Enum):
    DESTRUCTIVE = "destructive"
    SUCCESS = "success"


@dataclass(frozen=True)
class ConfirmationPrompt:
    """Content of the confirmation dialog shown before a mutation."""

    title: str
    description: str
    confirm_label: str
    style: ConfirmationStyle


# (from statuses, target status sent to the backend)
ACCOUNT_TRANSITIONS: dict[AccountAction, tuple[frozenset[ProviderStatus], ProviderStatus]] = {
    AccountAction.BLOCK: (frozenset({ProviderStatus.ACTIVE}), ProviderStatus.SUSPENDED),
    AccountAction.SUSPEND: (frozenset({ProviderStatus.ACTIVE}), ProviderStatus.SUSPENDED),
    AccountAction.ACTIVATE: (
        frozenset({ProviderStatus.SUSPENDED, ProviderStatus.BLOCKED}),
        ProviderStatus.ACTIVE,
    ),
}

_STATUS_ALIASES = {
    "ACTIVE": ProviderStatus.ACTIVE,
    "SUSPENDED": ProviderStatus.SUSPENDED,
    "BLOCKED": ProviderStatus.BLOCKED,
    "INACTIVE": ProviderStatus.INACTIVE,
    "DEACTIVATED": ProviderStatus.INACTIVE,
}


def parse_provider_status(raw: str | ProviderStatus | None) -> ProviderStatus:
    if isinstance(raw, ProviderStatus):
        return raw
    if not raw:
        return ProviderStatus.UNKNOWN
    return _STATUS_ALIASES.get(raw.strip().upper(), ProviderStatus.UNKNOWN)


def available_account_actions(status: str | ProviderStatus | None) -> list[AccountAction]:
    """Actions offered for a provider in ``status``, in display order."""
    parsed = parse_provider_status(status)
    return [
        action
        for action, (sources, _target) in ACCOUNT_TRANSITIONS.items()
        if parsed in sources
    ]


def target_status(action: AccountAction) -> ProviderStatus:
    return ACCOUNT_TRANSITIONS[action][1]


def assert_account_action(status: str | ProviderStatus | None, action: AccountAction) -> ProviderStatus:
    """Validate ``action`` against ``status`` and return the backend target status."""
    parsed = parse_provider_status(status)
    if action not in available_account_actions(parsed):
        raise InvalidTransition(
            f"Cannot {action.value} a provider whose status is {parsed.value}"
        )
    return target_status(action)


def confirmation_for(action: AccountAction, provider_name: str | None = None) -> ConfirmationPrompt:
    name = provider_name or "this provider"
    if action == AccountAction.BLOCK:
        return ConfirmationPrompt(
            title="Block Provider",
            description=(
                f"Are you sure you want to block {name}? "
                "They will not be able to receive new bookings."
            ),
            confirm_label="Block",
            style=ConfirmationStyle.DESTRUCTIVE,
        )
    if action == AccountAction.SUSPEND:
        return ConfirmationPrompt(
            title="Suspend Provider",
            description=(
                f"Are you sure you want to suspend {name}? "
                "Their account will be inactive until reactivated."
            ),
            confirm_label="Suspend",
            style=ConfirmationStyle.DESTRUCTIVE,
        )
    return ConfirmationPrompt(
        title="Activate Provider",
        description=f"Are you sure you want to activate {name}? They will regain access to the platform.",
        confirm_label="Activate",
        style=ConfirmationStyle.SUCCESS,
    )
