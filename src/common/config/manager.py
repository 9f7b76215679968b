from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException
from pathlib import Path
from typing import List, Optional

from .models import AppConfig
from ..exceptions import ConfigurationError

SECTIONS = ("pulse", "analytics", "server")


class ConfigManager:
    """Centralizes loading and validation of configuration"""

    def __init__(self, config_dir: Path = Path("conf")):
        self.config_dir = Path(config_dir)

    def load_section(self, section: str, profile: str = "default") -> DictConfig:
        """Loads one config group, e.g. conf/pulse/default.yaml"""
        config_path = self.config_dir / section / f"{profile}.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")

        return OmegaConf.load(config_path)

    def load(self, profile: str = "default", overrides: Optional[List[str]] = None) -> DictConfig:
        """
        Composes every section and validates it against the structured schema.
        Dotlist overrides (e.g. "pulse.window.capacity=30") are applied last.
        """
        raw = OmegaConf.create({
            section: self.load_section(section, profile) for section in SECTIONS
        })
        if overrides:
            raw = OmegaConf.merge(raw, OmegaConf.from_dotlist(overrides))
        return self.validate(raw)

    @staticmethod
    def validate(cfg: DictConfig) -> DictConfig:
        """
        Merges a raw (or Hydra composed) config onto the AppConfig schema.
        Unknown keys and wrong types raise ConfigurationError.
        """
        schema = OmegaConf.structured(AppConfig)
        try:
            merged = OmegaConf.merge(schema, cfg)
            # Resolve env interpolations now so a bad reference fails at startup
            OmegaConf.resolve(merged)
        except OmegaConfBaseException as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        return merged

    @staticmethod
    def defaults() -> DictConfig:
        return OmegaConf.structured(AppConfig)
