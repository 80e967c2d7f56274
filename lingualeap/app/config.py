from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

DEFAULTS: dict[str, Any] = {
    "list_devices": False,
    "output_device": None,
    "data_path": "assets/data/data.json",
    "chunk_size": 10,
    "selected_chunk": 0,
    "playback_speed": 1.0,
    "study_mode": "read_listen",
    "ui_language": "en",
    "settle_ms": 50,
    "clip_gap_ms": 500,
    "target_tail_ms": 500,
    "advance_delay_ms": 200,
    "practice_minutes": 15,
    "poll_ms": 30,
    "llm_provider": "gemini",
    "llm_model": "gemini-2.0-flash",
    "debug": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())
CHOICES: dict[str, tuple[Any, ...]] = {
    "playback_speed": (0.5, 0.75, 1.0, 1.25, 1.5),
    "study_mode": ("read_listen", "active_recall"),
    "ui_language": ("en", "sq"),
    "llm_provider": ("gemini",),
}
# (min, max or None)
INT_RANGES: dict[str, tuple[int, int | None]] = {
    "chunk_size": (1, 100),
    "selected_chunk": (0, None),
    "settle_ms": (0, 5000),
    "clip_gap_ms": (0, 10000),
    "target_tail_ms": (0, 10000),
    "advance_delay_ms": (0, 10000),
    "practice_minutes": (1, 180),
    "poll_ms": (10, 1000),
}


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def default_asset_config_path() -> Path:
    return Path(__file__).resolve().parents[2] / "assets" / "config" / "default.json"


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("LinguaLeap", "LinguaLeap"))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: payload[key] for key in CONFIG_KEYS if key in payload}


def normalize_config(values: dict[str, Any]) -> dict[str, Any]:
    """Clamp numeric settings into range; unknown choices fall back to DEFAULTS."""
    out = dict(values)
    for key, allowed in CHOICES.items():
        if key in out and out[key] not in allowed:
            out[key] = DEFAULTS[key]
    for key, (lo, hi) in INT_RANGES.items():
        if key not in out:
            continue
        try:
            value = int(out[key])
        except (TypeError, ValueError):
            out[key] = DEFAULTS[key]
            continue
        value = max(lo, value)
        if hi is not None:
            value = min(hi, value)
        out[key] = value
    return out


def load_default_config() -> dict[str, Any]:
    path = default_asset_config_path()
    if not path.exists():
        return copy.deepcopy(DEFAULTS)
    loaded = _load_json_dict(path)
    out = copy.deepcopy(DEFAULTS)
    for key in DEFAULTS.keys():
        if key in loaded:
            out[key] = loaded[key]
    return out


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    loaded = _known_only(_load_json_dict(chosen))
    merged = dict(defaults)
    merged.update(loaded)
    return normalize_config(merged), chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    payload = _known_only(values)
    defaults = load_default_config()
    if config_path:
        path = Path(config_path)
        existing = _known_only(_load_json_dict(path)) if path.exists() else {}
    else:
        path = ensure_user_config_exists(defaults)
        existing = _known_only(_load_json_dict(path))
    merged = dict(defaults)
    merged.update(existing)
    merged.update(payload)
    _write_json_dict(path, _known_only(merged))
    return path


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lingualeap")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument(
        "--output-device",
        type=int,
        default=defaults["output_device"],
        help="sounddevice output device id",
    )
    p.add_argument("--data-path", default=defaults["data_path"], help="sentence data JSON file")
    p.add_argument("--chunk-size", type=int, default=defaults["chunk_size"], help="sentences per chunk")
    p.add_argument(
        "--selected-chunk",
        type=int,
        default=defaults["selected_chunk"],
        help="zero-based chunk to open at startup",
    )
    p.add_argument(
        "--playback-speed",
        type=float,
        default=defaults["playback_speed"],
        choices=list(CHOICES["playback_speed"]),
        help="audio playback rate",
    )
    p.add_argument(
        "--study-mode",
        default=defaults["study_mode"],
        choices=list(CHOICES["study_mode"]),
        help="read & listen, or hide the translation until revealed",
    )
    p.add_argument(
        "--ui-language",
        default=defaults["ui_language"],
        choices=list(CHOICES["ui_language"]),
        help="UI language: English or Albanian",
    )
    p.add_argument(
        "--settle-ms",
        type=int,
        default=defaults["settle_ms"],
        help="delay before starting a clip so the device can release the previous one",
    )
    p.add_argument(
        "--clip-gap-ms",
        type=int,
        default=defaults["clip_gap_ms"],
        help="pause between the French clip and the translation clip",
    )
    p.add_argument(
        "--target-tail-ms",
        type=int,
        default=defaults["target_tail_ms"],
        help="pause after a translation-only clip before moving on",
    )
    p.add_argument(
        "--advance-delay-ms",
        type=int,
        default=defaults["advance_delay_ms"],
        help="delay before the next sentence in continuous play or loop repeat",
    )
    p.add_argument(
        "--practice-minutes",
        type=int,
        default=defaults["practice_minutes"],
        help="practice timer length",
    )
    p.add_argument("--poll-ms", type=int, default=defaults["poll_ms"], help="UI event poll interval (ms)")
    p.add_argument(
        "--llm-provider",
        default=defaults["llm_provider"],
        choices=list(CHOICES["llm_provider"]),
        help="hosted model provider for the AI tools",
    )
    p.add_argument("--llm-model", default=defaults["llm_model"], help="hosted model name")
    p.add_argument("--debug", action="store_true", help="verbose playback logging")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("list_devices"):
        args.list_devices = True
    if defaults.get("debug"):
        args.debug = True
    return args
