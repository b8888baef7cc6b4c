import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/lockers/domain/")


@nox.session(python=PYTHON_VERSIONS[0])
def tests_sqlite(session: nox.Session) -> None:
    """Run application tests against the SQLite overlay."""
    _install(session)
    session.run("pytest", "--env", "sqlite", "tests/lockers/application/", "-m", "not slow")
