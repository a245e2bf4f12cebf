"""Settings document — layers, checks and notifiers described in YAML.

Example::

    layers:
      - name: Connectivity
        checks:
          - {type: dns, name: api-dns, hostname: api.example.com}
          - {type: http, name: api-health, url: https://api.example.com/health}
    notifiers:
      - {type: console, threshold: Okay}
      - {type: slack, threshold: Error, webhook_url: https://hooks.slack.com/...}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .checks import build_check
from .engine.clock import Clock
from .engine.core import NimatorEngine
from .engine.layer import Layer
from .engine.models import NotificationLevel
from .notifications import ConsoleNotifier, Notifier, OpsGenieNotifier, SlackNotifier

logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    """The settings document is missing, malformed or refers to unknown types."""


# ── Models ───────────────────────────────────────────────────────────────────


class _NotifierBase(BaseModel):
    threshold: str = "Error"

    @field_validator("threshold", mode="before")
    @classmethod
    def _normalize_threshold(cls, value: Any) -> str:
        return NotificationLevel.parse(value).label


class ConsoleSettings(_NotifierBase):
    type: Literal["console"] = "console"
    threshold: str = "Okay"

    @classmethod
    def get_example(cls) -> ConsoleSettings:
        return cls(threshold="Okay")


class SlackSettings(_NotifierBase):
    type: Literal["slack"] = "slack"
    webhook_url: str = ""

    @classmethod
    def get_example(cls) -> SlackSettings:
        return cls(threshold="Error", webhook_url="https://hooks.slack.com/services/T000/B000/XXXX")


class OpsGenieSettings(_NotifierBase):
    type: Literal["opsgenie"] = "opsgenie"
    api_key: str = ""
    team: str | None = None

    @classmethod
    def get_example(cls) -> OpsGenieSettings:
        return cls(threshold="Critical", api_key="your-opsgenie-api-key", team="ops")


NotifierSettings = Annotated[
    Union[ConsoleSettings, SlackSettings, OpsGenieSettings],
    Field(discriminator="type"),
]


class LayerSettings(BaseModel):
    name: str
    checks: list[dict[str, Any]] = Field(default_factory=list)


class NimatorSettings(BaseModel):
    """Top-level document: which layers to run and who to tell."""

    layers: list[LayerSettings] = Field(default_factory=list)
    notifiers: list[NotifierSettings] = Field(default_factory=lambda: [ConsoleSettings()])

    # -- (De)serialization ----------------------------------------------------

    @classmethod
    def from_yaml(cls, text: str) -> NimatorSettings:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SettingsError(f"Settings are not valid YAML: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise SettingsError(f"Settings must be a mapping, got {type(raw).__name__}")

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings: {e}") from e

    @classmethod
    def load(cls, path: Path | str) -> NimatorSettings:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SettingsError(f"Could not read settings file {path}: {e}") from e
        settings = cls.from_yaml(text)
        logger.info(
            "Loaded %d layers and %d notifiers from %s",
            len(settings.layers), len(settings.notifiers), path,
        )
        return settings

    def to_yaml(self) -> str:
        return yaml.dump(
            self.model_dump(exclude_none=True),
            allow_unicode=True, sort_keys=False, default_flow_style=False,
        )

    @classmethod
    def get_example(cls) -> NimatorSettings:
        return cls(
            notifiers=[
                ConsoleSettings.get_example(),
                OpsGenieSettings.get_example(),
                SlackSettings.get_example(),
            ],
            layers=[
                LayerSettings(
                    name="Layer 1",
                    checks=[{"type": "noop", "name": "noop 1"}, {"type": "noop", "name": "noop 2"}],
                ),
                LayerSettings(
                    name="Layer 2",
                    checks=[
                        {"type": "dns", "name": "example-dns", "hostname": "example.com"},
                        {"type": "http", "name": "example-http", "url": "https://example.com/"},
                    ],
                ),
            ],
        )

    # -- Building -------------------------------------------------------------

    def build_layers(self) -> list[Layer]:
        layers = []
        for layer_settings in self.layers:
            checks = []
            for definition in layer_settings.checks:
                try:
                    checks.append(build_check(definition))
                except (TypeError, ValueError) as e:
                    raise SettingsError(f"Layer {layer_settings.name!r}: {e}") from e
            layers.append(Layer(layer_settings.name, checks))
        return layers

    def build_engine(self, clock: Clock | None = None) -> NimatorEngine:
        return NimatorEngine(self.build_layers(), clock=clock)

    def build_notifiers(self) -> list[Notifier]:
        notifiers: list[Notifier] = []
        for n in self.notifiers:
            if isinstance(n, ConsoleSettings):
                notifiers.append(ConsoleNotifier(threshold=n.threshold))
            elif isinstance(n, SlackSettings):
                notifiers.append(SlackNotifier(webhook_url=n.webhook_url, threshold=n.threshold))
            elif isinstance(n, OpsGenieSettings):
                notifiers.append(OpsGenieNotifier(api_key=n.api_key, threshold=n.threshold, team=n.team))
        return notifiers
