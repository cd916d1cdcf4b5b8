"""In-memory records held by the stores."""

from dataclasses import dataclass


@dataclass
class Joke:
    """A joke in question/answer form, tagged with a genre."""

    id: int
    question: str
    answer: str
    genre: str


@dataclass(frozen=True)
class User:
    """A registered user. Only the password digest is kept."""

    username: str
    password_hash: str
