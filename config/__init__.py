from .config import ProofConfig, load_config, save_config

__all__ = ['ProofConfig', 'load_config', 'save_config']
