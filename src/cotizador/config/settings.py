"""
Centralized settings and path configuration for the quote tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_package_root() -> Path:
    """Get the cotizador package directory."""
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""
    
    # Directory holding the exported sheet tables
    data_dir: Path
    
    # Input tables
    services_csv: Path
    extras_csv: Path
    zones_csv: Path
    postal_codes_csv: Path
    discounts_csv: Path
    
    log_level: str = "INFO"
    
    # Tables that must exist for a load to succeed
    required_tables: tuple = ('services_csv', 'zones_csv', 'postal_codes_csv')
    
    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and package layout."""
        env_dir = os.environ.get('COTIZADOR_DATA_DIR')
        root = Path(data_dir or env_dir or get_package_root() / 'data' / 'tables')
        
        return cls(
            data_dir=root,
            services_csv=root / 'servicios.csv',
            extras_csv=root / 'extras.csv',
            zones_csv=root / 'zonas.csv',
            postal_codes_csv=root / 'codigos_postales.csv',
            discounts_csv=root / 'descuentos.csv',
            log_level=os.environ.get('COTIZADOR_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
