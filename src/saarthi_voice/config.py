"""Runtime configuration for the Saarthi voice engine."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="SAARTHI_VOICE_", env_file=".env", extra="ignore")

    app_name: str = "saarthi-voice"
    log_level: str = "INFO"
    default_locale: str = "en-US"
    voice_enabled: bool = True
    speech_rate: float = Field(default=0.9, description="Speech rate multiplier; slightly slow for elderly users.")
    echo_buffer_seconds: float = Field(
        default=0.5,
        description="Settle delay between the end of an announcement and microphone reactivation.",
    )
    idle_prompt_seconds: float = 8.0
    navigation_delay_seconds: float = 0.8
    route_cooldown_seconds: float = 0.5
    acceptance_threshold: float = 0.5
    fuzzy_score_floor: float = Field(default=82.0, ge=0.0, le=100.0)
    excluded_routes: list[str] = Field(default_factory=lambda: ["/language", "/register"])
    phrase_time_limit: float = 5.0


settings = Settings()


@dataclass(slots=True)
class VoiceTimings:
    """Delays that shape turn-taking; tests shrink these to milliseconds."""

    echo_buffer_seconds: float = 0.5
    idle_prompt_seconds: float = 8.0
    navigation_delay_seconds: float = 0.8

    @classmethod
    def from_settings(cls, source: Settings) -> VoiceTimings:
        return cls(
            echo_buffer_seconds=source.echo_buffer_seconds,
            idle_prompt_seconds=source.idle_prompt_seconds,
            navigation_delay_seconds=source.navigation_delay_seconds,
        )
