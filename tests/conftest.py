import pytest

from reclaim.config import settings


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path, monkeypatch):
    # Keep logs, rule files and seen history out of the working tree
    monkeypatch.setattr(settings, "PROJECT_ROOT", tmp_path)
    return tmp_path
