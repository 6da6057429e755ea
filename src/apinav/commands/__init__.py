"""Built-in CLI sub-commands for apinav.

* :mod:`~apinav.commands.inspect` -- read-only views of a parsed document:
  ``info``, ``endpoints``, ``nav``, ``show`` and ``auth``.

Each command is a plain callback function registered directly on the root
app in :mod:`apinav.app`.
"""
