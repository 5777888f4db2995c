"""Nox Configuration for Kubemon."""
import os
from pathlib import Path
import shutil

import nox
from nox.sessions import Session

src_locations = ["src"]
test_locations = ["tests"]


def _install(session: Session) -> None:
    session.install("uv")
    # Install the package in editable mode with test and dev extras
    session.run("uv", "pip", "install", "--active", "-e", ".[test,dev]")


@nox.session(venv_backend="venv")
def tests(session: Session) -> None:
    """Run the test suite."""
    _install(session)

    args = session.posargs or test_locations

    session.run(
        "coverage",
        "run",
        "-m",
        "pytest",
        "--junitxml=.test_report.xml",
        *args,
    )


@nox.session(venv_backend="venv")
def lint(session: Session) -> None:
    """Lint code using flake8."""
    _install(session)
    args = session.posargs or src_locations
    session.run("flake8", "--max-line-length", "95", *args)


@nox.session(venv_backend="venv")
def typecheck(session: Session) -> None:
    """Type check code."""
    _install(session)
    args = session.posargs or src_locations
    session.run("mypy", "--explicit-package-bases", *args)


@nox.session(venv_backend="venv")
def build(session: Session) -> None:
    session.install("build")
    session.run("python", "-m", "build", "--outdir", "dist", ".")


@nox.session(venv_backend="venv")
def clean(session: Session) -> None:
    """Clean up all build artifacts, caches, and local virtual environments."""
    session.log("Removing build artifacts, caches, and .egg-info directories...")
    dirs_to_remove = ["dist", "build", ".eggs", ".pytest_cache", ".mypy_cache", ".venv"]

    repo_root = Path(".")
    for egg_info_path in repo_root.rglob("*.egg-info"):
        if egg_info_path.is_dir():
            dirs_to_remove.append(str(egg_info_path))

    for path_str in sorted(set(dirs_to_remove)):
        path_obj = Path(path_str)
        if path_obj.is_dir():
            session.log(f"Removing directory: {path_obj}")
            shutil.rmtree(path_obj, ignore_errors=True)

    for file_str in [".test_report.xml", ".coverage"]:
        if os.path.isfile(file_str):
            session.log(f"Removing file: {file_str}")
            os.remove(file_str)

    session.log("Clean-up finished.")
