"""Errors raised by command handlers.

Every error carries the message shown to the invoker. The router replies with
that message for everything except ``TransientApiFailure``, which is reported
with a generic notice after logging the traceback.
"""

from typing import Optional


class HelpdeskError(Exception):
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotConfigured(HelpdeskError):
    default_message = "This feature is not set up for this server."


class DuplicateTicket(HelpdeskError):
    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(f"You already have an open ticket: <#{channel_id}>")


class NotATicket(HelpdeskError):
    default_message = "This is not a ticket channel."


class TicketClosing(HelpdeskError):
    default_message = "This ticket is already closing."


class InvalidTarget(HelpdeskError):
    default_message = "Could not resolve that target."


class InsufficientPermission(HelpdeskError):
    default_message = "You do not have permission to use this command."


class ActionRejected(HelpdeskError):
    default_message = "Discord rejected this action."


class UsageError(HelpdeskError):
    default_message = "Invalid command usage."


class TransientApiFailure(HelpdeskError):
    default_message = "A Discord API error occurred."
