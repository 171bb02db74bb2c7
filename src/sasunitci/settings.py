from __future__ import annotations
import os

CONFIG_PATH = os.environ.get("SASUNITCI_CONFIG", os.path.join("~", ".sasunitci", "installations.json"))
NODE_NAME = os.environ.get("SASUNITCI_NODE", "master")
RUN_ALL_LOG = "run_all.log"
