"""Built-in CLI sub-commands for pbclient.

Each module exposes a Typer app or a plain command function that
:func:`pbclient.app.main` registers on the root application:

- :mod:`~pbclient.commands.config` -- profile management.
- :mod:`~pbclient.commands.auth` -- credential tests, logins and refresh.
- :mod:`~pbclient.commands.collections` -- collection listing.
- :mod:`~pbclient.commands.records` -- record CRUD and batches.
- :mod:`~pbclient.commands.request` -- free-form requests.
"""
