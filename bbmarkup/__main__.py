"""Package entry point for ``python -m bbmarkup``.

WHY: Users run the tool as ``python -m bbmarkup page.txt`` for CLI mode,
or ``python -m bbmarkup --serve`` for the HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().

RULES:
- ``--serve`` starts the API (host/port from BBMARKUP_API_HOST/PORT)
- Without ``--serve``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from bbmarkup.server.app import run_api
        run_api()
    else:
        from bbmarkup.cli import main
        main()
