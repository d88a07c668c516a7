"""Shared pytest fixtures for shepimport tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from shepimport.core.config import ImportConfig

TASK_SCHEMA = """\
generator client {
  provider = "prisma-client-js"
}

enum Priority {
  LOW
  HIGH
}

model Task {
  id        String   @id @default(cuid())
  title     String
  done      Boolean  @default(false)
  priority  Priority @default(LOW)
  notes     String?
  createdAt DateTime @default(now())
}
"""

USERS_PAGE = """\
import { useState } from "react";

export default function UsersPage() {
  const [users, setUsers] = useState([]);

  return (
    <div>
      <h1>Users</h1>
      <ul>
        {users.map((u) => (
          <li key={u.id}>{u.name}</li>
        ))}
      </ul>
      <button>Add User</button>
    </div>
  );
}
"""

USERS_ROUTE = """\
export default async function handler(req, res) {
  if (req.method === "POST") {
    const { name, email } = req.body;
    const user = await prisma.user.create({ data: { name, email } });
    return res.status(201).json(user);
  }
  return res.status(405).end();
}
"""


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write `files` (relative path -> text) under `root`."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a factory writing a project tree into a fresh directory."""

    def factory(files: dict[str, str]) -> Path:
        return write_tree(tmp_path / "project", files)

    return factory


@pytest.fixture
def users_project(make_project: Callable[[dict[str, str]], Path]) -> Path:
    """A pages-router project with a users page and a POST /users route."""
    package = {"dependencies": {"next": "14.0.0", "react": "18.2.0"}}
    return make_project(
        {
            "package.json": json.dumps(package),
            "pages/users.tsx": USERS_PAGE,
            "pages/api/users.ts": USERS_ROUTE,
        }
    )


@pytest.fixture
def flat_routes_config() -> ImportConfig:
    """Config whose route paths carry no ``/api`` prefix."""
    return ImportConfig(route_base_path="", max_workers=2)


@pytest.fixture
def task_schema() -> str:
    """Prisma schema with one enum and one Task model."""
    return TASK_SCHEMA


@pytest.fixture
def users_page() -> str:
    """Pages-router page listing users with an Add User button."""
    return USERS_PAGE


@pytest.fixture(autouse=True)
def reset_shepimport_logging():
    """Drop handlers a test installed on the ``shepimport`` logger."""
    yield
    logger = logging.getLogger("shepimport")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
