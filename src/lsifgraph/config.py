from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    # Used for document languageId, project kind, moniker scheme and package manager.
    language_id: str = os.getenv("LSIFGRAPH_LANGUAGE_ID", "cpp")

    # Reported in the metaData vertex.
    tool_name: str = os.getenv("LSIFGRAPH_TOOL_NAME", "lsif-cpp")
    tool_version: str = os.getenv("LSIFGRAPH_TOOL_VERSION", "dev")

    # Fact store
    store_path: str = os.getenv("LSIFGRAPH_STORE_PATH", ":memory:")

    # Merlin type strings are truncated to this many characters.
    hover_max_chars: int = int(os.getenv("LSIFGRAPH_HOVER_MAX_CHARS", "200"))

    package_version: str = os.getenv("LSIFGRAPH_PACKAGE_VERSION", "1.0")
