import pytest

from ghbackup.core.types import RepositoryDescriptor

ENV_VARS = ("ORG", "GITHUB_TOKEN", "DEST", "CLONE_WORKERS", "PER_PAGE", "MAX_PAGES", "TIMEOUT_SEC", "API_BASE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_repo(name: str, host: str = "https://github.com/acme") -> RepositoryDescriptor:
    return RepositoryDescriptor.from_api(
        {"id": hash(name) & 0xFFFF, "name": name, "clone_url": f"{host}/{name}.git", "private": False}
    )


@pytest.fixture
def repos():
    return [make_repo(f"repo-{i:02d}") for i in range(10)]
