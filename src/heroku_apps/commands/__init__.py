# ABOUTME: Command handlers package for heroku-apps
# ABOUTME: Handlers are plain functions taking an explicit CommandContext
