"""Domain error types."""


class VoiceRelayError(Exception):
    """Base for every failure the pipeline surfaces to the UI layer."""

    hint: str = ''


class AlreadyListeningError(VoiceRelayError):
    """Raised when start() is requested while a capture session is active."""


class NotListeningError(VoiceRelayError):
    """Stop requested with no active session. Tolerated by the controller, never raised from stop()."""


class DeviceUnavailableError(VoiceRelayError):
    """Raised when the microphone is missing, busy, or permission was denied."""

    hint = 'Check microphone permissions in your system settings.'


class RecorderBusyError(DeviceUnavailableError):
    """Raised by the native recorder host when a capture is already running."""


class AlreadyDownloadingError(VoiceRelayError):
    """Raised when a download for the same model name is already in flight."""


class NotInstalledError(VoiceRelayError):
    """Raised when a local whisper model is used or selected before it is installed."""

    hint = 'Download the model first: voice-relay models download <name>'


class ModelResolutionError(VoiceRelayError):
    """Raised when a whisper model name is not in the known catalog."""


class NoApiKeyError(VoiceRelayError):
    """Raised before any network call when the selected cloud provider has no API key."""

    hint = 'Add an API key for this provider in config.yaml (open settings).'


class ProviderUnsupportedError(VoiceRelayError):
    """Raised when a provider has no cloud transcription handler."""


class UnsupportedAudioFormatError(VoiceRelayError):
    """Raised when an artifact's declared encoding or sample rate is rejected by a provider."""


class ModeSwitchRejectedError(VoiceRelayError):
    """Raised when the capture strategy is changed while a session is active."""


class InferenceFailedError(VoiceRelayError):
    """Raised when local inference fails or produces no usable result."""


class HttpError(VoiceRelayError):
    """Raised when a cloud transcription call fails. status=0 means a network-layer failure."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f'HTTP {status}: {body}' if status else f'Network error: {body}')
        self.status = status
        self.body = body
