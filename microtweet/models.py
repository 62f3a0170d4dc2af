"""
Pydantic models for Twitter API v1.1 entities and the rules that build them
from decoded JSON.
"""

from __future__ import annotations

import json
import weakref
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from microtweet.exceptions import MalformedEntity, TransportFailure

if TYPE_CHECKING:
    from microtweet.client import TwitterClient

T = TypeVar("T")

TWITTER_DATETIME_FORMAT = "%a %b %d %H:%M:%S %z %Y"
DEFAULT_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def parse_twitter_datetime(value: Any) -> datetime:
    """Parse Twitter's ``created_at`` format, e.g. ``Wed Aug 27 13:08:45 +0000 2008``."""

    if not isinstance(value, str):
        raise MalformedEntity(f"Timestamp must be a string, got {type(value).__name__}.")
    try:
        return datetime.strptime(value, TWITTER_DATETIME_FORMAT)
    except ValueError as exc:
        raise MalformedEntity(f"Unparseable timestamp '{value}'.") from exc


def dig(value: Any, *steps: str | int) -> Any:
    """
    Walk ``steps`` through nested JSON, returning ``None`` at the first step
    whose shape does not match (missing key, non-mapping, index out of range).
    """

    current = value
    for step in steps:
        if isinstance(step, int):
            if not isinstance(current, list) or not 0 <= step < len(current):
                return None
        elif not isinstance(current, Mapping) or step not in current:
            return None
        current = current[step]
    return current


def parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedEntity(f"Response body is not valid JSON: {exc}") from exc


def parse_array(body: str, decoder: Callable[[Any], T]) -> list[T]:
    """Decode a JSON array body, applying ``decoder`` to each element in order."""

    data = parse_json(body)
    if not isinstance(data, list):
        raise MalformedEntity(f"Expected a JSON array, got {type(data).__name__}.")
    return [decoder(item) for item in data]


def _present(data: Mapping[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    # JSON null is treated like an absent key.
    return {key: data[key] for key in keys if data.get(key) is not None}


class Entity(BaseModel):
    """Immutable API object holding a weak reference to the client that decoded it."""

    id: int

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    _client: weakref.ReferenceType | None = PrivateAttr(default=None)

    @classmethod
    def _materialize(cls, client: "TwitterClient", fields: dict[str, Any]):
        try:
            entity = cls.model_validate(fields)
        except ValidationError as exc:
            raise MalformedEntity(f"Invalid {cls.__name__} payload: {exc}") from exc
        entity._client = weakref.ref(client)
        return entity

    @staticmethod
    def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise MalformedEntity(f"{kind} payload must be a JSON object, got {type(data).__name__}.")
        return data

    def _owner(self) -> "TwitterClient":
        client = self._client() if self._client is not None else None
        if client is None:
            raise TransportFailure(f"The client that produced {type(self).__name__} {self.id} is gone.")
        return client


class User(Entity):
    """A Twitter user account."""

    created_at: datetime = DEFAULT_TIMESTAMP
    screen_name: str = ""
    name: str = ""
    description: str = ""
    location: str = ""
    url: str = ""
    followers_count: int = 0
    friends_count: int = 0
    statuses_count: int = 0

    OPTIONAL_KEYS: ClassVar[tuple[str, ...]] = (
        "screen_name",
        "name",
        "description",
        "location",
        "followers_count",
        "friends_count",
        "statuses_count",
    )

    @classmethod
    def from_api(cls, client: "TwitterClient", data: Any) -> "User":
        data = cls._require_mapping(data, "User")
        fields = _present(data, ("id",) + cls.OPTIONAL_KEYS)
        if data.get("created_at") is not None:
            fields["created_at"] = parse_twitter_datetime(data["created_at"])

        # The top-level "url" is a t.co link; the profile URL lives in entities.
        expanded_url = dig(data, "entities", "url", "urls", 0, "expanded_url")
        if isinstance(expanded_url, str):
            fields["url"] = expanded_url
        return cls._materialize(client, fields)

    def get_timeline(self, count: int = 5) -> list["Tweet"]:
        """Return the most recent tweets and retweets posted by this user."""

        return self._owner().get_user_timeline(user_id=self.id, count=count)


class Tweet(Entity):
    """A single status update."""

    created_at: datetime = DEFAULT_TIMESTAMP
    text: str = ""
    source: str = ""
    in_reply_to_status_id: int = 0
    in_reply_to_user_id: int = 0
    in_reply_to_screen_name: str = ""
    retweet_count: int = 0
    favorite_count: int = 0
    user: User | None = None

    OPTIONAL_KEYS: ClassVar[tuple[str, ...]] = (
        "text",
        "source",
        "in_reply_to_status_id",
        "in_reply_to_user_id",
        "in_reply_to_screen_name",
        "retweet_count",
        "favorite_count",
    )

    @classmethod
    def from_api(cls, client: "TwitterClient", data: Any) -> "Tweet":
        data = cls._require_mapping(data, "Tweet")
        fields = _present(data, ("id",) + cls.OPTIONAL_KEYS)
        if data.get("created_at") is not None:
            fields["created_at"] = parse_twitter_datetime(data["created_at"])
        if data.get("user") is not None:
            fields["user"] = User.from_api(client, data["user"])
        return cls._materialize(client, fields)

    def get_in_reply_to(self) -> "Tweet | None":
        """Fetch the tweet this one replies to, or ``None`` when it is not a reply."""

        if not self.in_reply_to_status_id:
            return None
        return self._owner().get_tweet(self.in_reply_to_status_id)
