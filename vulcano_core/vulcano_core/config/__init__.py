from .settings import Settings, load_settings, SETTINGS_FILE

__all__ = [
    'Settings',
    'load_settings',
    'SETTINGS_FILE',
]
