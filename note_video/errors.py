class NoteVideoError(Exception):
    """Base class for every failure raised while turning a note into a video."""


class ConfigurationError(NoteVideoError):
    """Raised at startup when a required credential or binary is missing."""


class EmptyInputError(NoteVideoError):
    """Raised when the note contains no sentence that can become a scene."""


class SpeechSynthesisError(NoteVideoError):
    pass


class TtsAuthError(SpeechSynthesisError):
    """Raised when the text-to-speech provider rejects the API key."""


class TtsCallError(SpeechSynthesisError):
    pass


class ImageCallError(NoteVideoError):
    """Raised when image generation fails for good (after the allowed retries)."""


class ProbeError(NoteVideoError):
    pass


class EncodingError(NoteVideoError):
    pass


class StorageError(NoteVideoError):
    pass
