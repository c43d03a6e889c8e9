from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tight_five.app import create_app
from tight_five.config import Settings
from tight_five.storage import Storage


class StubLLM:
    """Returns queued responses in order and records every call.

    Queue a string to return it, or an exception instance to raise it.
    """

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, str]] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def __call__(self, stage: str, system: str, prompt: str) -> str:
        self.calls.append((stage, system, prompt))
        if not self.responses:
            raise AssertionError(f"StubLLM got an unexpected call for {stage}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir: Path) -> Storage:
    return Storage(data_dir)


@pytest.fixture
def stub_llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(data_dir=data_dir, rate_limit_max=1000)


@pytest.fixture
def client(settings: Settings, stub_llm: StubLLM) -> TestClient:
    app = create_app(settings, llm=stub_llm)
    return TestClient(app, headers={"X-User-Id": "alice"})
