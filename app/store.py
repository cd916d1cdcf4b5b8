"""In-memory joke collection."""

import logging
import random
import threading
from typing import Optional

from app.errors import EmptyCollection, NotFound, ValidationError
from app.models import Joke

logger = logging.getLogger("jokes_api.store")

JOKE_FIELDS = ("question", "answer", "genre")


def _has_value(value: Optional[str]) -> bool:
    """Missing, empty and whitespace-only values count as absent."""
    return bool(value and value.strip())


class JokeStore:
    """Ordered collection of jokes with CRUD and genre filtering.

    Ids come from a counter owned by the store and are never reused, so a
    delete followed by an add cannot produce a duplicate id.

    Mutations hold ``_lock`` because FastAPI runs sync handlers in a
    thread pool.
    """

    def __init__(self):
        self._jokes: list[Joke] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._jokes)

    def list_all(self) -> list[Joke]:
        """Return every joke in insertion order."""
        return list(self._jokes)

    def get(self, joke_id: int) -> Joke:
        for joke in self._jokes:
            if joke.id == joke_id:
                return joke
        raise NotFound(f"Joke with id {joke_id} not found.")

    def pick_random(self) -> Joke:
        jokes = self.list_all()
        if not jokes:
            raise EmptyCollection()
        return random.choice(jokes)

    def filter_by_genre(self, genre: str) -> list[Joke]:
        """Return jokes whose genre matches exactly (case-sensitive).

        Raises:
            NotFound: If no joke has that genre.
        """
        matches = [joke for joke in self._jokes if joke.genre == genre]
        if not matches:
            raise NotFound(f"No jokes found for genre '{genre}'.")
        return matches

    def add(
        self,
        question: Optional[str],
        answer: Optional[str],
        genre: Optional[str],
    ) -> Joke:
        """Append a new joke and return it.

        Raises:
            ValidationError: If question, answer or genre is missing or blank.
        """
        if not all(map(_has_value, (question, answer, genre))):
            raise ValidationError(
                "A joke must have a question, an answer and a genre."
            )

        with self._lock:
            joke = Joke(
                id=self._next_id, question=question, answer=answer, genre=genre
            )
            self._next_id += 1
            self._jokes.append(joke)

        logger.info(
            "New joke created",
            extra={"event_type": "joke_created", "joke_id": joke.id, "genre": genre},
        )
        return joke

    def update(
        self,
        joke_id: int,
        question: Optional[str] = None,
        answer: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> Joke:
        """Overwrite the provided, non-blank fields of an existing joke.

        Raises:
            NotFound: If no joke has ``joke_id``.
            ValidationError: If none of the fields carries a value.
        """
        changes = {
            name: value
            for name, value in zip(JOKE_FIELDS, (question, answer, genre))
            if _has_value(value)
        }

        with self._lock:
            joke = self.get(joke_id)
            if not changes:
                raise ValidationError(
                    "Nothing to edit. Provide at least question, answer or genre."
                )
            for name, value in changes.items():
                setattr(joke, name, value)

        logger.info(
            "Joke updated",
            extra={
                "event_type": "joke_updated",
                "joke_id": joke_id,
                "fields": sorted(changes),
            },
        )
        return joke

    def remove(self, joke_id: int) -> Joke:
        """Delete a joke; the remaining jokes keep their order and ids."""
        with self._lock:
            joke = self.get(joke_id)
            self._jokes.remove(joke)

        logger.info(
            "Joke deleted",
            extra={"event_type": "joke_deleted", "joke_id": joke_id},
        )
        return joke
