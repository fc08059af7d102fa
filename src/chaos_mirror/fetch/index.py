from __future__ import annotations

import json
from typing import List

import requests
from pydantic import TypeAdapter, ValidationError

from chaos_mirror.core.errors import ProgramIndexError
from chaos_mirror.core.models import DEFAULT_PLATFORM, Program, ProgramIndexEntry
from chaos_mirror.http.client import HttpClient
from chaos_mirror.utils.logging import get_logger

DEFAULT_INDEX_URL = "https://chaos-data.projectdiscovery.io/index.json"

_ENTRIES = TypeAdapter(List[ProgramIndexEntry])


def parse_index(payload: bytes, default_platform: str = DEFAULT_PLATFORM) -> List[Program]:
    """
    Decode the program index into programs, keeping index order.

    Raises:
        ProgramIndexError: If the payload is not JSON or does not match the index shape.
    """
    try:
        raw = json.loads(payload)
    except ValueError as e:
        raise ProgramIndexError(f"Program index is not valid JSON: {e}") from e

    try:
        entries = _ENTRIES.validate_python(raw)
    except ValidationError as e:
        problems = []
        for error in e.errors()[:5]:
            field_path = ".".join(str(loc) for loc in error["loc"])
            problems.append(f"  {field_path}: {error['msg']}")
        raise ProgramIndexError("Program index validation failed:\n" + "\n".join(problems)) from e

    return [entry.to_program(default_platform) for entry in entries]


class ProgramIndexFetcher:
    """Fetches the published program index."""

    def __init__(self, client: HttpClient, url: str = DEFAULT_INDEX_URL, default_platform: str = DEFAULT_PLATFORM):
        self.client = client
        self.url = url
        self.default_platform = default_platform
        self.log = get_logger("chaos_mirror.fetch.index")

    def fetch(self) -> List[Program]:
        try:
            resp = self.client.get(self.url)
        except requests.RequestException as e:
            raise ProgramIndexError(f"Cannot fetch program index {self.url}: {e}") from e

        if not resp.ok:
            raise ProgramIndexError(f"Program index {self.url} returned HTTP {resp.status_code}")
        self.log.info("Program index fetched: %s (status=%s)", self.url, resp.status_code)

        programs = parse_index(resp.content, self.default_platform)
        self.log.info("Program index contains %d entries", len(programs))
        return programs
