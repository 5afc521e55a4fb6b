"""Entry point for ``python -m xorctl``."""

from .service_runner import run_watchdog_service


def main() -> None:
    run_watchdog_service()


if __name__ == "__main__":
    main()
