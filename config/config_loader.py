"""Load settings.yaml into typed dataclasses. Reads the API key from the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class OpenRouterConfig:
    base_url: str = "https://openrouter.ai/api/v1"
    api_key_env: str = "OPENROUTER_API_KEY"
    timeout_sec: float | None = 120.0
    referer: str = "https://github.com/Kyoungsoo2314/obsidian-vault-council"
    title: str = "Obsidian Vault Council"


@dataclass
class CouncilDefaults:
    selected_models: list[str] = field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 4000
    response_style: str = "concise"     # "concise", "balanced", "detailed"
    language: str = "English"
    enable_chairman: bool = False
    chairman_model: str | None = None
    chairman_mode: str = "manual"       # "manual" or "always"
    max_concurrency: int | None = None
    round_timeout_sec: float | None = None


@dataclass
class SaveConfig:
    save_location: str = "context-based"   # "context-based" or "custom"
    custom_save_folder: Path = Path("AI Council")
    vault_dir: Path = Path(".")


@dataclass
class AppConfig:
    openrouter: OpenRouterConfig
    council: CouncilDefaults
    save: SaveConfig
    api_key_present: bool = False

    @property
    def synthesize_by_default(self) -> bool:
        return self.council.enable_chairman and self.council.chairman_mode == "always"


def _optional_float(value) -> float | None:
    return float(value) if value is not None else None


def _optional_int(value) -> int | None:
    return int(value) if value is not None else None


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs a warning for a missing API key but does not raise; the gateway
    refuses to start without one.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    router_raw = raw.get("openrouter", {})
    router_defaults = OpenRouterConfig()
    openrouter = OpenRouterConfig(
        base_url=str(router_raw.get("base_url", router_defaults.base_url)),
        api_key_env=str(router_raw.get("api_key_env", router_defaults.api_key_env)),
        timeout_sec=_optional_float(router_raw.get("timeout_sec", router_defaults.timeout_sec)),
        referer=str(router_raw.get("referer", router_defaults.referer)),
        title=str(router_raw.get("title", router_defaults.title)),
    )

    council_raw = raw.get("council", {})
    council = CouncilDefaults(
        selected_models=[str(m) for m in council_raw.get("selected_models", [])],
        temperature=float(council_raw.get("temperature", 0.7)),
        max_tokens=int(council_raw.get("max_tokens", 4000)),
        response_style=str(council_raw.get("response_style", "concise")),
        language=str(council_raw.get("language", "English")),
        enable_chairman=bool(council_raw.get("enable_chairman", False)),
        chairman_model=council_raw.get("chairman_model"),
        chairman_mode=str(council_raw.get("chairman_mode", "manual")),
        max_concurrency=_optional_int(council_raw.get("max_concurrency")),
        round_timeout_sec=_optional_float(council_raw.get("round_timeout_sec")),
    )

    save_raw = raw.get("save", {})
    save = SaveConfig(
        save_location=str(save_raw.get("save_location", "context-based")),
        custom_save_folder=Path(save_raw.get("custom_save_folder", "AI Council")),
        vault_dir=Path(save_raw.get("vault_dir", ".")),
    )

    api_key_present = bool(os.environ.get(openrouter.api_key_env, "").strip())
    if api_key_present:
        logger.info("OpenRouter API key found in %s", openrouter.api_key_env)
    else:
        logger.warning("No OpenRouter API key: set %s in .env", openrouter.api_key_env)

    return AppConfig(
        openrouter=openrouter,
        council=council,
        save=save,
        api_key_present=api_key_present,
    )
