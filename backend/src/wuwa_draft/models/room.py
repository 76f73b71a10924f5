"""User and seat models."""

from dataclasses import dataclass


@dataclass
class DiscordUser:
    """An authenticated Discord identity."""

    discord_id: str
    username: str
    avatar: str | None = None  # CDN URL

    def to_dict(self) -> dict:
        return {
            "discord_id": self.discord_id,
            "username": self.username,
            "avatar": self.avatar,
        }


@dataclass
class Seat:
    """A player slot held by a user on a specific connection."""

    user: DiscordUser
    connection_id: str | None = None

    @property
    def discord_id(self) -> str:
        return self.user.discord_id

    def to_dict(self) -> dict:
        return {**self.user.to_dict(), "connection_id": self.connection_id}
