#!/usr/bin/env python3

# Imports {{{
# builtins
import pathlib
from importlib.util import find_spec

# 3rd party
import appdirs

# }}}


BROTLI_SUPPORTED = find_spec("brotli") is not None
DEFAULT_CONFIG_PATH = pathlib.Path(appdirs.user_config_dir("wobblesync")) / "config.json"
MAX_CONFIG_SIZE = 1024 * 1024  # 1MB
DEFAULT_SETTINGS = {
    "pacing_delay": 1,  # seconds between mutating steps
    "timeout": 30,  # seconds, per HTTP request
}

ROOT_POST_ID = "1"
NEW_POST_REVISION = 1
URL_DISPLAY_LENGTH = 100

# error codes reported by the Wobble JSON-RPC API
RPC_NOT_FOUND = 404
RPC_CONFLICT = 409
