"""Errors raised by the draft core and its collaborators.

Every error carries a stable ``code`` that is sent to the client in
``error`` frames, so the frontend can react without parsing messages.
"""


class DraftError(Exception):
    """Base class for caller-facing draft failures."""

    code = "draft_error"
    default_message = "Draft error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class PreconditionError(DraftError):
    code = "precondition_failed"
    default_message = "Both players are required to start the draft"


class DraftValidationError(DraftError):
    """An attempted ban or pick was rejected; the session is unchanged."""

    code = "validation_error"


class NotAPlayer(DraftValidationError):
    code = "not_a_player"
    default_message = "You are not a player"


class NoActiveSession(DraftValidationError):
    code = "no_active_session"
    default_message = "The draft has not started"


class NotYourTurn(DraftValidationError):
    code = "not_your_turn"
    default_message = "It is not your turn"


class WrongPhaseKind(DraftValidationError):
    code = "wrong_phase_kind"
    default_message = "This action is not allowed in the current phase"


class ItemAlreadyBanned(DraftValidationError):
    code = "item_already_banned"
    default_message = "This item is already banned"


class ItemAlreadyPicked(DraftValidationError):
    code = "item_already_picked"
    default_message = "This item is already picked"


class NotAuthenticated(DraftError):
    code = "not_authenticated"
    default_message = "Not authenticated"


class SlotTaken(DraftError):
    code = "slot_taken"
    default_message = "This player slot is already taken"


class InvalidSlot(DraftError):
    code = "invalid_slot"
    default_message = "Unknown player slot"


class InvalidConfig(DraftError):
    code = "invalid_config"
    default_message = "Invalid draft configuration"


class InvalidPayload(DraftError):
    code = "invalid_payload"
    default_message = "Malformed message"


class DiscordAuthError(Exception):
    """Discord OAuth exchange or user lookup failed."""
