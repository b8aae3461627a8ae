"""Allow ``python -m pkg_export_tar``."""

from pkg_export_tar.cli.app import app

if __name__ == "__main__":
    app()
