"""
Location of per-user hydrator files.

Module Attributes:
    home (str): The user's home directory.
    hydrator_dir (str): Directory holding ``config.toml`` and log files.
"""

import os

home = os.path.expanduser("~")
# pylint: disable=invalid-name
hydrator_dir = os.environ.get("HYDRATOR_HOME", f"{home}/.hydrator/")
