"""Project root entry point for launching the web interface."""

from __future__ import annotations

import os


def main():
    from wisenest_i18n.web import create_app

    app = create_app()
    port = int(os.environ.get("PORT", "5500"))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "") == "1")


if __name__ == "__main__":
    main()
