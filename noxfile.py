import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# psycopg2-binary ships a compiled extension per interpreter; a cached wheel
# built for another Python breaks the production overlay.
_C_EXT_PACKAGES = ["psycopg2-binary"]


def _install(session: nox.Session) -> None:
    """Install gamezone with its test extra into the nox virtualenv."""
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the whole suite on every supported Python."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_domain(session: nox.Session) -> None:
    """Aggregates only: no HTTP, no threads."""
    _install(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_checkout(session: nox.Session) -> None:
    """Checkout saga, concurrency and reconciliation, repeated to shake out races."""
    _install(session)
    for _ in range(5):
        session.run(
            "pytest",
            "tests/application/test_checkout_saga.py",
            "tests/application/test_checkout_concurrency.py",
            "tests/application/test_checkout_recovery.py",
            "tests/bdd/",
            "-q",
        )


@nox.session(python=PYTHON_VERSIONS[-1])
def checkout_contention(session: nox.Session) -> None:
    """Hammer checkout with Locust against an API on localhost:8000.

    Start the API and seed it first (``python src/manage.py seed``).
    """
    _install(session)
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "ContestedCheckoutUser",
        "--headless",
        "--users",
        "20",
        "--spawn-rate",
        "5",
        "--run-time",
        "1m",
        "--host",
        "http://localhost:8000",
    )
