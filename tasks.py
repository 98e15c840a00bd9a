"""Invoke tasks for developing ChangeVersion.

Every task shells out to `uv`, so the same environment backs tests, linting,
type checks, builds, and a smoke run of the `cv` executable.
"""

from __future__ import annotations

import shlex
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCE_DIRS = ("src", "tests")


def _run_uv(ctx: Context, args: Sequence[str], *, dry_run: bool = False) -> None:
    """Run `uv` with ``args`` from the project root.

    Args:
        ctx: Invoke execution context.
        args: Arguments placed after the `uv` executable.
        dry_run: Print the command instead of running it.
    """
    command = shlex.join(("uv", *args))
    if dry_run:
        print(f"[dry-run] {command}")
        return
    with ctx.cd(str(PROJECT_ROOT)):
        ctx.run(command, echo=True, pty=True)


@task(help={"dev": "Install the dev extra (pytest, ruff, mypy, invoke)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or refresh the project virtual environment."""
    args = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _run_uv(ctx, args)


@task(help={"clean": "Empty dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into `dist/`."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _run_uv(ctx, ["build"])


@task(
    help={
        "part": "Version component to bump (major, minor, patch).",
        "dry_run": "Show the resulting version without editing pyproject.toml.",
    }
)
def bump_version(ctx: Context, part: str = "patch", dry_run: bool = False) -> None:
    """Bump the version recorded in pyproject.toml."""
    args = ["version", "--bump", part]
    if dry_run:
        args.append("--dry-run")
    _run_uv(ctx, args)


@task(
    help={
        "k": "pytest -k expression.",
        "path": "Test file or directory (defaults to tests/).",
        "options": "Extra flags passed to pytest unchanged.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite."""
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _run_uv(ctx, args)


@task(help={"fix": "Let ruff apply fixes.", "check_format": "Also run `ruff format --check`."})
def lint(ctx: Context, fix: bool = False, check_format: bool = False) -> None:
    """Lint the sources with ruff."""
    if check_format:
        _run_uv(ctx, ["run", "ruff", "format", "--check", *SOURCE_DIRS])
    args = ["run", "ruff", "check", *SOURCE_DIRS]
    if fix:
        args.append("--fix")
    _run_uv(ctx, args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package."""
    _run_uv(ctx, ["run", "mypy", "src"])


@task
def smoke(ctx: Context) -> None:
    """Run `cv init`, `cv status`, and `cv commit` in a throwaway directory."""
    with tempfile.TemporaryDirectory(prefix="cv-smoke-") as workdir:
        Path(workdir, "hello.txt").write_text("hello\n", encoding="utf-8")
        for command in (["init"], ["status"], ["commit", "-m", "smoke"], ["log"]):
            _run_uv(ctx, ["run", "cv", "-C", workdir, *command])


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks, and tests as CI does."""
    ctx.invoke(lint, check_format=True)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, bump_version, tests, lint, mypy, smoke, ci)
