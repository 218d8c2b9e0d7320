# ABOUTME: Utilities package initialization for heroku-apps
# ABOUTME: Contains shared utilities for the API client, git, output, safety, and logging

"""
heroku-apps utilities

Shared utilities:
    - client.py: platform API client and typed response records
    - git.py: git remote listing and editing
    - output.py: headers, aligned lists, key/value tables, labelled actions
    - formatting.py: byte sizes, dates, pluralisation, dyno hours
    - safety.py: typed-name confirmation for destructive commands
    - logging.py: structured logging with invocation IDs and audit trail
"""
