import os
import sys

import pytest

# Ensure repo-local imports (e.g., `import coordinator`) resolve without extra setup.
src_dir = os.path.abspath(os.path.dirname(__file__))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "-E",
        "--engine",
        action="store",
        default=None,
        dest="engine_path",
        help="Run tests marked with @pytest.mark.engine against this UCI engine binary (e.g. stockfish)",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "engine: needs a real UCI engine passed with -E/--engine")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list
) -> None:
    if not config.getoption("engine_path"):
        skip_engine = pytest.mark.skip(reason="use -E/--engine PATH to enable real engine tests")
        for item in items:
            if item.get_closest_marker("engine") is not None:
                item.add_marker(skip_engine)


@pytest.fixture(scope="session")
def engine_path(pytestconfig: pytest.Config) -> str:
    return pytestconfig.getoption("engine_path")
