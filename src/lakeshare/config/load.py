import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs"
PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
DEFAULT_LOG_CONSOLE_URL = (
    "https://console.aws.amazon.com/cloudwatch/home?region={region}"
    "#logEventViewer:group={log_group};stream={log_stream}"
)


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    description: str
    type: str
    allowed_pattern: str


@dataclass(frozen=True)
class Settings:
    stage: str
    log_level: str
    region: str
    response_timeout: int
    log_console_url: str
    parameters: dict[str, ParameterDefinition]

    def parameter(self, key: str) -> ParameterDefinition:
        try:
            return self.parameters[key]
        except KeyError:
            raise ValueError(f"Parameter '{key}' is not defined in the {self.stage} config") from None


def load_config(stage: str | None = None, config_dir: Path = CONFIG_DIR) -> dict:
    """Read `<stage>_config.yaml` with placeholders resolved; stage defaults to $STAGE or "default"."""
    stage = stage or os.getenv("STAGE", "default")
    config_path = Path(config_dir) / f"{stage}_config.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    cfg = yaml.safe_load(substitute_env_vars(config_path.read_text())) or {}
    cfg["stage"] = stage
    return cfg


def load_settings(stage: str | None = None, config_dir: Path = CONFIG_DIR) -> Settings:
    cfg = load_config(stage, config_dir)
    parameters = {
        key: ParameterDefinition(
            name=p["name"],
            description=p.get("description", ""),
            type=p.get("type", "String"),
            allowed_pattern=p.get("allowedPattern", ".+"),
        )
        for key, p in (cfg.get("parameters") or {}).items()
    }
    return Settings(
        stage=cfg["stage"],
        log_level=str(cfg.get("logLevel", "INFO")).upper(),
        region=cfg["region"],
        response_timeout=int(cfg.get("responseTimeout", 10)),
        log_console_url=cfg["logConsoleUrl"],
        parameters=parameters,
    )


def fallback_settings() -> Settings:
    """Settings used to still deliver a response when the packaged config cannot be loaded."""
    return Settings(
        stage="fallback",
        log_level="INFO",
        region=os.getenv("AWS_REGION", "us-east-1"),
        response_timeout=10,
        log_console_url=DEFAULT_LOG_CONSOLE_URL,
        parameters={},
    )


def substitute_env_vars(content: str) -> str:
    """Resolve ``${NAME}`` and ``${NAME:fallback}`` placeholders from the Lambda environment.

    A placeholder without a fallback whose variable is unset is a configuration error.
    """
    def resolve(match):
        name, has_fallback, fallback = match.group(1).partition(":")
        value = os.getenv(name.strip())
        if value is not None:
            return value
        if has_fallback:
            return fallback.strip()
        raise ValueError(f"Environment variable '{name}' is required but not set")

    return PLACEHOLDER_RE.sub(resolve, content)
