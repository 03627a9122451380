# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv and install lightbridge with its dev tools."""
    ctx.run("uv sync --all-extras")


@task
def lint(ctx):
    """
    Static checks: ruff lint, ruff format check and mypy over src.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=src --cov-report=term-missing", pty=True)


@task
def mock(ctx, unique_id="ACCF23000001", model="53"):
    """Run a mock controller on localhost for trying out scan/sync."""
    ctx.run(f"lightbridge mock --unique-id {unique_id} --model {model}", pty=True)


@task
def build_package(ctx):
    """
    Build sdist and wheel into dist/.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")
