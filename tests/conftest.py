import pytest


def pytest_addoption(parser):
    parser.addoption("--run-web", action="store_true", default=False, help="run tests against a live backend")


def pytest_configure(config):
    config.addinivalue_line("markers", "web: mark test as needing a live backend")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-web"):
        return
    skip_web = pytest.mark.skip(reason="need --run-web option to run")
    for item in items:
        if "web" in item.keywords:
            item.add_marker(skip_web)
