"""SpeechCapture port -- abstracts speech-to-text for challenge answers."""

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class SpeechCapture(Protocol):
    """Listens once and returns zero or more transcriptions; the last one wins.

    Implementations raise on capture errors (microphone, recognizer).
    """

    async def listen(self) -> List[str]: ...
