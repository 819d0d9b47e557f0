import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

SUPPORTED_CURVES = ("bls12_381",)
SUPPORTED_REDUCTIONS = ("modular", "wide")

LOG_LEVEL_ENV = "PROOF_LOG_LEVEL"


@dataclass
class ProofConfig:
    curve: str = "bls12_381"
    field_reduction: str = "modular"
    max_constraints: int = 1 << 16

    log_level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path("logs"))
    results_dir: Path = field(default_factory=lambda: Path("results"))
    enable_performance_monitoring: bool = True

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        self.results_dir = Path(self.results_dir)

        if self.curve not in SUPPORTED_CURVES:
            raise ValueError(f"Unsupported curve: {self.curve}")
        if self.field_reduction not in SUPPORTED_REDUCTIONS:
            raise ValueError(
                f"Unsupported field reduction: {self.field_reduction}")
        if self.max_constraints <= 0:
            raise ValueError("max_constraints must be positive")

        env_level = os.environ.get(LOG_LEVEL_ENV)
        if env_level:
            self.log_level = env_level.upper()


def load_config(config_path: Optional[Path] = None) -> ProofConfig:
    """Load configuration from file or return default"""
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            proof_data = config_data.get('proof', {})
            return ProofConfig(
                curve=proof_data.get('curve', 'bls12_381'),
                field_reduction=proof_data.get('field_reduction', 'modular'),
                max_constraints=int(proof_data.get('max_constraints', 1 << 16)),
                log_level=config_data.get('log_level', 'INFO'),
                log_dir=Path(config_data.get('log_dir', 'logs')),
                results_dir=Path(config_data.get('results_dir', 'results')),
                enable_performance_monitoring=config_data.get(
                    'enable_performance_monitoring', True)
            )
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")
            logger.warning("Using default configuration")

    return ProofConfig()


def save_config(config: ProofConfig, config_path: Optional[Path] = None):
    """Save configuration to YAML file"""
    if config_path is None:
        config_path = Path("config.yaml")

    config_data = {
        'proof': {
            'curve': config.curve,
            'field_reduction': config.field_reduction,
            'max_constraints': config.max_constraints
        },
        'log_level': config.log_level,
        'log_dir': str(config.log_dir),
        'results_dir': str(config.results_dir),
        'enable_performance_monitoring': config.enable_performance_monitoring
    }

    with open(config_path, 'w') as f:
        yaml.dump(config_data, f, default_flow_style=False)
