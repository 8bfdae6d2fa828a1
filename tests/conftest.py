# Shared pytest fixtures
from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import pytest

from statement_enricher.logging.init import reset_logging

HEADER = "Date,Description,Reference Number,Currency,Amount,Cr/Dr,Balance"


class FakeClient:
    """Extraction client that answers from a mapping or a callable.

    ``replies`` maps the description (text after the instruction) to either
    a reply string or an exception instance to raise.
    """

    def __init__(self, replies=None, default: str = "") -> None:
        self.replies = replies or {}
        self.default = default
        self.prompts: list[str] = []

    async def extract(self, prompt: str) -> str:
        self.prompts.append(prompt)
        description = prompt.split(": ", 1)[-1]
        reply = self.replies.get(description, self.default)
        if isinstance(reply, BaseException):
            raise reply
        await asyncio.sleep(0)
        return reply


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """expected_headers:
  - Date
  - Description
  - Reference Number
  - Currency
  - Amount
  - Cr/Dr
  - Balance
header_fingerprint_width: 3
description_column: Description
output_directory: uploads
output_suffix: _processed
max_upload_bytes: 10485760
extraction:
  model: gemini-1.5-flash
  api_base: https://generativelanguage.googleapis.com/v1beta
  timeout_seconds: 5
  instruction: Extract the person name
  no_match_sentinel: "----"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "enricher.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv() -> bytes:
    """Statement with leading noise, a duplicated column and one blank description."""
    return (
        "Bank of Tirana,Statement\n"
        "Account,AL47 2121 1009 0000 0002 3569 8741\n"
        "\n"
        f"{HEADER},Amount\n"
        '2024-01-01,"John from Acme Corp",REF1,USD,100,Dr,900,100\n'
        "2024-01-02,  ,REF2,USD,50,Cr,950,50\n"
        '2024-01-03,"Payment Smith, J.",REF3,EUR,20,Dr,930,20\n'
    ).encode("utf-8")


@pytest.fixture()
def write_csv(temp_workdir: Path, sample_csv: bytes) -> Path:
    path = temp_workdir / "data" / "statement.csv"
    path.write_bytes(sample_csv)
    return path


@pytest.fixture()
def fake_client_factory():
    return FakeClient
