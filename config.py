# config.py (defaults + YAML overlay + logging/RNG init)
import copy
import logging
import logging.config
import os
import random
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from faker import Faker

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CFG: Dict[str, Any] = {
    "rng_seed": None,
    "elasticsearch": {
        "hosts": ["http://localhost:9200"],
        # "user:password"; ES_HTTP_AUTH env var wins over this value
        "http_auth": None,
        "request_timeout": 30,
    },
    "indices": {
        "playbacks": "playback_stats",
        "posts": "posts",
        "analyze": "121~fr",
    },
    "catalog": {"movies_path": "data/movies.json"},
    "generation": {
        "year": 2014,
        "num_playbacks": 10000,
        "num_posts": 500,
        "chunk_size": 500,
    },
    "logging": {"level": "INFO"},
}


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (over or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    DEFAULT_CFG overlaid with a YAML file.
    - path=None: use config.yaml if it exists, else defaults only
    - explicit path that does not exist: FileNotFoundError
    """
    cfg_path = Path(path or DEFAULT_CONFIG_PATH)
    over: Dict[str, Any] = {}
    if cfg_path.exists():
        with cfg_path.open() as f:
            over = yaml.safe_load(f) or {}
    elif path is not None:
        raise FileNotFoundError(f"config file not found: {path}")
    cfg = _merge(DEFAULT_CFG, over)

    env_auth = os.getenv("ES_HTTP_AUTH")
    if env_auth:
        cfg["elasticsearch"]["http_auth"] = env_auth
    return cfg


def configure_logging(cfg: Dict[str, Any]):
    log_cfg = cfg.get("logging", {}) or {}
    if "dict_config" in log_cfg:
        logging.config.dictConfig(log_cfg["dict_config"])
        return
    logging.basicConfig(
        level=str(log_cfg.get("level", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def seed_rng_from_cfg(cfg: Dict[str, Any]):
    seed = cfg.get("rng_seed", None)
    if seed is None:
        return
    random.seed(int(seed))
    Faker.seed(int(seed))
    logger.info("[INIT] random.seed(%s)", seed)
