"""Domain port protocols for decoupling the engine from storage and speech."""

from .document_store import DocumentStore
from .speech_capture import SpeechCapture

__all__ = ["DocumentStore", "SpeechCapture"]
