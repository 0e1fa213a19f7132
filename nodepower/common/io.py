import io
import json
import os
from pathlib import Path

import joblib
import requests
import yaml

DEFAULT_TIMEOUT_SEC = 10.0


def read_yaml(path: str | os.PathLike):
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def ensure_dir(path: str | os.PathLike):
    Path(path).mkdir(parents=True, exist_ok=True)


def write_json(data: dict, path: str | os.PathLike):
    ensure_dir(Path(path).parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def fetch_bytes(location: str, timeout: float = DEFAULT_TIMEOUT_SEC) -> bytes:
    """Read a model artifact from an HTTP(S) URL or a local filepath."""
    if is_url(location):
        resp = requests.get(location, timeout=timeout)
        resp.raise_for_status()
        return resp.content
    with open(location, "rb") as f:
        return f.read()


def load_json_artifact(location: str) -> dict:
    return json.loads(fetch_bytes(location).decode("utf-8"))


def load_joblib_artifact(location: str):
    if is_url(location):
        return joblib.load(io.BytesIO(fetch_bytes(location)))
    return joblib.load(location)
