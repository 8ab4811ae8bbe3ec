"""
Built-in commands shipped with clidispatch.

Every dispatcher looks here when a command is missing from its own namespace,
so the commands below are available to every application. The dispatcher's
last-resort fallback, help, lives here as well.
"""
HOME = __name__
