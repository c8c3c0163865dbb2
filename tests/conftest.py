"""Pytest configuration and fixtures."""

import logging
import os
import tempfile

import pytest

# logs of the app module land here instead of the working tree
os.environ.setdefault("ROOT_DIR", tempfile.mkdtemp(prefix="portfolio-agent-tests-"))

from indexer.index_runner import build_index  # noqa: E402
from services.rag.HydeGenerator import HydeGenerator  # noqa: E402
from services.rag.RagPipeline import RagPipeline  # noqa: E402
from services.session.SessionStore import SessionStore  # noqa: E402
from shared.clients.store.memory.StoreClientMemory import StoreClientMemory  # noqa: E402
from shared.helper.HelperConfig import HelperConfig  # noqa: E402
from shared.rag.rag_index import clear_cache  # noqa: E402
from tests.fakes import FakeClock, ScriptedLLM  # noqa: E402

logging.basicConfig(level=logging.DEBUG)


@pytest.fixture(autouse=True)
def log_test_info(request):
    """Log test start and finish."""
    logging.info("Starting test: %s", request.node.name)
    yield
    logging.info("Finished test: %s", request.node.name)


@pytest.fixture()
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("portfolio_agent.tests"))


@pytest.fixture()
def index_dir(tmp_path) -> str:
    """A freshly built retrieval index in a temporary directory."""
    path = str(tmp_path / "index")
    build_index(path)
    yield path
    clear_cache()


@pytest.fixture()
def scripted_llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture()
def rag_pipeline(helper_config, index_dir) -> RagPipeline:
    return RagPipeline(
        helper_config=helper_config,
        hyde_generator=HydeGenerator(helper_config=helper_config, llm_client=None),
        index_dir=index_dir,
    )


@pytest.fixture()
def session_store(helper_config) -> SessionStore:
    return SessionStore(helper_config=helper_config, store=StoreClientMemory(helper_config=helper_config))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
