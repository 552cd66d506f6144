"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l1_entities.config import AppConfig
from voice_relay.l1_entities.provider import Provider, ProviderSelection
from voice_relay.l2_use_cases.cloud_transcription_router import CloudTranscriptionRouter
from voice_relay.l2_use_cases.model_manager import ModelManager
from voice_relay.l2_use_cases.ports.capture_backend import CaptureBackend
from voice_relay.l2_use_cases.ports.llm_client import LLMClient
from voice_relay.l2_use_cases.ports.local_inference import LocalInferenceEngine
from voice_relay.l2_use_cases.ports.model_store import ModelStore
from voice_relay.l2_use_cases.ports.native_recorder import NativeRecorderHost
from voice_relay.l2_use_cases.ports.permission_advisor import PermissionAdvisor
from voice_relay.l2_use_cases.ports.settings_store import SettingsStore
from voice_relay.l2_use_cases.ports.speech_recognizer import SpeechRecognizer
from voice_relay.l2_use_cases.silence_monitor import SilenceDetector, SilenceMonitor
from voice_relay.l2_use_cases.suggest_actions_use_case import SuggestActionsUseCase
from voice_relay.l2_use_cases.transcribe_artifact_use_case import TranscribeArtifactUseCase
from voice_relay.l3_interface_adapters.controllers.capture_controller import CaptureSessionController
from voice_relay.l3_interface_adapters.gateways.file_settings_store import FileSettingsStore
from voice_relay.l3_interface_adapters.gateways.google_speech_transcriber import GoogleSpeechTranscriber
from voice_relay.l3_interface_adapters.gateways.hf_model_store import HfModelStore
from voice_relay.l3_interface_adapters.gateways.native_recorder_backend import NativeRecorderBackend
from voice_relay.l3_interface_adapters.gateways.ollama_llm_client import OllamaLLMClient
from voice_relay.l3_interface_adapters.gateways.openai_llm_client import GEMINI_OPENAI_BASE_URL, OpenAICompatLLMClient
from voice_relay.l3_interface_adapters.gateways.openai_transcriber import OpenAITranscriber
from voice_relay.l3_interface_adapters.gateways.openrouter_transcriber import OPENROUTER_HEADERS, OpenRouterTranscriber
from voice_relay.l3_interface_adapters.gateways.recognizer_backend import RecognizerBackend
from voice_relay.l3_interface_adapters.gateways.sounddevice_audio_source import SounddeviceAudioSource
from voice_relay.l3_interface_adapters.gateways.sounddevice_recorder_host import SounddeviceRecorderHost
from voice_relay.l3_interface_adapters.gateways.whisper_local_inference import WhisperLocalInference
from voice_relay.l3_interface_adapters.gateways.whisper_streaming_recognizer import WhisperStreamingRecognizer
from voice_relay.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber
from voice_relay.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader
from voice_relay.l4_frameworks_and_drivers.infra_config import InfraConfig, build_selection


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        infra: InfraConfig | None = None,
        advisor: PermissionAdvisor | None = None,
        *,
        settings: SettingsStore | None = None,
        model_store: ModelStore | None = None,
        local_inference: LocalInferenceEngine | None = None,
        recorder_host: NativeRecorderHost | None = None,
        recognizer: SpeechRecognizer | None = None,
    ) -> None:
        self.config = config
        self.infra = infra or InfraConfig()

        self.silence_monitor = SilenceMonitor()
        self.settings: SettingsStore = settings or FileSettingsStore()
        self.model_store: ModelStore = model_store or HfModelStore()
        self.local_inference: LocalInferenceEngine = local_inference or WhisperLocalInference()
        self.recorder_host: NativeRecorderHost = recorder_host or SounddeviceRecorderHost(
            on_silence=self.silence_monitor.signal,
            detector=SilenceDetector(threshold=config.silence.threshold, duration=config.silence.duration),
        )
        self.recognizer: SpeechRecognizer = recognizer or self._build_recognizer()

        self.model_manager = ModelManager(
            store=self.model_store,
            engine=self.local_inference,
            settings=self.settings,
            default_model=config.local_model.default,
        )
        self.router = CloudTranscriptionRouter(
            openai=OpenAITranscriber(base_url=self.infra.openai.base_url),
            google=GoogleSpeechTranscriber(endpoint=self.infra.google.endpoint),
            openrouter=OpenRouterTranscriber(base_url=self.infra.openrouter.base_url),
        )
        self.backends: dict[BackendKind, CaptureBackend] = {
            BackendKind.NATIVE_RECORDER: NativeRecorderBackend(self.recorder_host),
            BackendKind.BROWSER_RECOGNIZER: RecognizerBackend(self.recognizer),
        }
        self.controller = CaptureSessionController(
            backends=self.backends,
            transcribe_artifact=TranscribeArtifactUseCase(self.model_manager, self.router, self.recorder_host),
            silence_monitor=self.silence_monitor,
            settings=self.settings,
            advisor=advisor,
            strategy=config.capture.strategy,
            language=config.capture.language,
            silence_enabled=config.silence.enabled,
        )

    def _build_recognizer(self) -> SpeechRecognizer:
        rc = self.config.recognizer
        return WhisperStreamingRecognizer(
            model_store=self.model_store,
            model_name=rc.model,
            language=self.config.capture.language,
            audio_source_factory=SounddeviceAudioSource,
            transcriber_factory=WhisperTranscriber,
            chunk_duration=rc.chunk_duration,
            overlap=rc.overlap,
            silence_threshold=rc.silence_threshold,
            pause_duration=rc.pause_duration,
            interim_interval=rc.interim_interval,
        )

    def selection(self, provider: Provider | None = None) -> ProviderSelection:
        return build_selection(self.config, self.infra, provider)

    def llm_client(self, provider: Provider | None = None) -> LLMClient:
        active = provider or self.config.provider.active
        match active:
            case Provider.OPENAI:
                return OpenAICompatLLMClient(api_key=self.infra.openai.api_key, base_url=self.infra.openai.base_url)
            case Provider.OPENROUTER:
                return OpenAICompatLLMClient(
                    api_key=self.infra.openrouter.api_key,
                    base_url=self.infra.openrouter.base_url,
                    default_headers=OPENROUTER_HEADERS,
                )
            case Provider.GOOGLE:
                return OpenAICompatLLMClient(api_key=self.infra.google.api_key, base_url=GEMINI_OPENAI_BASE_URL)
            case Provider.CUSTOM_LOCAL:
                return OllamaLLMClient(host=self.infra.ollama.host)

    def suggest_actions(self, provider: Provider | None = None) -> SuggestActionsUseCase:
        return SuggestActionsUseCase(self.llm_client(provider))

    @staticmethod
    def config_loader() -> YamlConfigLoader:
        return YamlConfigLoader()
