from pathlib import Path

import pytest

from stack_src.manager import StackManager
from stack_src.models import Settings

COMPOSE_YAML = """\
services:
  blacklight:
    image: blacklight
  nginx:
    image: nginx
  solr:
    image: solr
  db:
    image: postgres
  transfer:
    image: alpine
volumes:
  solr_data:
  db_data:
"""

APPS_YAML = """\
web:
  - blacklight
  - nginx
search: solr
broken:
  - elasticsearch
"""


@pytest.fixture
def stack_root(tmp_path: Path) -> Path:
    (tmp_path / "docker-compose.yml").write_text(COMPOSE_YAML, encoding="utf-8")
    (tmp_path / "apps.yml").write_text(APPS_YAML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(stack_root: Path) -> Settings:
    return Settings(root=stack_root, project_name="demo", _env_file=None)


@pytest.fixture
def manager(settings: Settings) -> StackManager:
    return StackManager(settings)
