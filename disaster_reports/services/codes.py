"""Tracking code generation for public report lookup."""
from __future__ import annotations

import secrets
import string
import threading
import time
from typing import Callable

CODE_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 3
STAMP_DIGITS = 6
_SUFFIX_SPACE = len(CODE_ALPHABET) ** SUFFIX_LENGTH


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class CodeGenerator:
    """Build codes shaped like ``QA-123456-7AB``.

    The middle block is the last six digits of the current epoch milliseconds and
    the tail is three random base-36 characters. Codes issued by one generator
    within the same millisecond never repeat; uniqueness across processes is left
    to the database constraint on ``reports.code``.
    """

    def __init__(
        self,
        prefix: str = "QA",
        clock: Callable[[], int] = _epoch_millis,
        choice: Callable[[str], str] = secrets.choice,
    ) -> None:
        self.prefix = prefix.upper()
        self._clock = clock
        self._choice = choice
        self._lock = threading.Lock()
        self._stamp: str | None = None
        self._issued: set[str] = set()

    def _suffix(self) -> str:
        return "".join(self._choice(CODE_ALPHABET) for _ in range(SUFFIX_LENGTH))

    def generate(self) -> str:
        with self._lock:
            while True:
                stamp = str(self._clock()).zfill(STAMP_DIGITS)[-STAMP_DIGITS:]
                if stamp != self._stamp:
                    self._stamp = stamp
                    self._issued.clear()
                if len(self._issued) < _SUFFIX_SPACE:
                    break
                time.sleep(0.001)

            suffix = self._suffix()
            while suffix in self._issued:
                suffix = self._suffix()
            self._issued.add(suffix)
            return f"{self.prefix}-{stamp}-{suffix}"


_generators: dict[str, CodeGenerator] = {}
_generators_lock = threading.Lock()


def get_code_generator(prefix: str = "QA") -> CodeGenerator:
    key = prefix.upper()
    with _generators_lock:
        generator = _generators.get(key)
        if generator is None:
            generator = _generators[key] = CodeGenerator(key)
        return generator


def generate_code(prefix: str = "QA") -> str:
    return get_code_generator(prefix).generate()
