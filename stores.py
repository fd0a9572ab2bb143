"""
In-memory chat stores

A message board and a user directory guarded by a shared-read /
exclusive-write lock. A completed write is visible to every later read.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

from models import ChatUser, Message

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """
    Many concurrent readers or one writer.

    Writers waiting to acquire block new readers so a steady stream of reads
    cannot starve them.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_lock(self):
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_lock(self):
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MessageStore:
    """Append-only chat message board"""

    def __init__(self):
        self._messages: List[Message] = []
        self._lock = ReadWriteLock()

    def add_message(self, message: Message) -> None:
        with self._lock.write_lock():
            self._messages.append(message)

    def get_messages(self, user: str = "") -> List[Message]:
        """All messages, or only those sent by `user`. Returns a copy."""
        with self._lock.read_lock():
            if not user:
                return list(self._messages)
            return [m for m in self._messages if m.sender == user]


class UserManager:
    """Chat user directory keyed by user id"""

    def __init__(self):
        self._users: Dict[str, ChatUser] = {}
        self._lock = ReadWriteLock()

    def add_user(self, user: ChatUser) -> None:
        """Add a user; ValueError if the id is taken."""
        with self._lock.write_lock():
            if user.id in self._users:
                raise ValueError(f"user already exists: {user.id}")
            self._users[user.id] = user
        logger.debug(f"Added chat user {user.id}")

    def remove_user(self, user_id: str) -> None:
        with self._lock.write_lock():
            if user_id not in self._users:
                raise KeyError(f"user not found: {user_id}")
            del self._users[user_id]

    def get_user(self, user_id: str) -> ChatUser:
        with self._lock.read_lock():
            try:
                return self._users[user_id]
            except KeyError:
                raise KeyError(f"user not found: {user_id}") from None
