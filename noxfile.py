import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with all extras into the nox virtualenv."""
    session.run(
        "poetry",
        "install",
        "--all-extras",
        external=True,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/shared/", "tests/ordering/domain/", "tests/ordering/analytics/")


@nox.session(python=PYTHON_VERSIONS)
def tests_relational(session: nox.Session) -> None:
    """Run the order store and engine tests against a SQLite database."""
    _install(session)
    session.env["SQLITE_DATABASE_URI"] = f"sqlite:///{session.create_tmp()}/harvest-ordering.db"
    session.run(
        "pytest",
        "--env",
        "sqlite",
        "tests/ordering/application/test_order_persistence.py",
        "tests/ordering/application/test_order_store.py",
        "tests/ordering/application/test_checkout.py",
        *session.posargs,
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def loadtest(session: nox.Session) -> None:
    """Run a short headless Locust session against a running API."""
    _install(session)
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "--headless",
        "--users",
        "20",
        "--spawn-rate",
        "5",
        "--run-time",
        "1m",
        "--host",
        session.posargs[0] if session.posargs else "http://localhost:8000",
    )
