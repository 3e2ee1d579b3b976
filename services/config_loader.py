import copy

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "accounting": {
        "standard_workday_minutes": 480,
    },
    "calendar": {
        "source": "fixed",
        "years": [],
        "holidays": [
            {"date": "2025-01-01", "name": "Confraternização Universal"},
            {"date": "2025-04-21", "name": "Tiradentes"},
            {"date": "2025-05-01", "name": "Dia do Trabalho"},
            {"date": "2025-09-07", "name": "Independência"},
            {"date": "2025-10-12", "name": "Nossa Sra. Aparecida"},
            {"date": "2025-11-02", "name": "Finados"},
            {"date": "2025-11-15", "name": "Proclamação da República"},
            {"date": "2025-12-25", "name": "Natal"},
        ],
    },
    "storage": {
        "backend": "json",
        "path": ".timebank/storage.json",
    },
    "slack": {
        "enabled": False,
        "notify_channel": "",
    },
    "display": {
        "recent_limit": 8,
    },
    "logging": {
        "level": "WARNING",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(DEFAULT_CONFIG, user_config)
    return copy.deepcopy(DEFAULT_CONFIG)
