# ABOUTME: heroku-apps package initialization
# ABOUTME: Exposes version information

"""
heroku-apps - manage Heroku apps from the command line.

Package layout:

heroku_apps/
├── __init__.py          <- version
├── __main__.py          <- `python -m heroku_apps`
├── cli.py               <- typer app, command table, error boundary
├── config.py            <- settings from environment variables
├── exceptions.py        <- user-facing errors
├── commands/
│   ├── context.py       <- per-invocation CommandContext, app resolution
│   └── apps.py          <- list, info, create, rename, open, destroy
└── utils/
    ├── client.py        <- platform API client and response records
    ├── git.py           <- git remote bookkeeping
    ├── output.py        <- styled terminal output
    ├── formatting.py    <- byte sizes, dates, dyno hours
    ├── safety.py        <- destructive-action confirmation
    └── logging.py       <- structlog setup and audit trail
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
