# ABOUTME: Allows `python -m heroku_apps`
# ABOUTME: Delegates to the console-script entry point

from heroku_apps.cli import main

if __name__ == "__main__":
    main()
