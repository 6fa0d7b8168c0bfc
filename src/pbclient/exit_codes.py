"""Process exit codes of the ``pbclient`` command.

Every :class:`~pbclient.exceptions.PbclientError` subclass carries one of
these, and request failures pick theirs from the HTTP status, so a script
can tell "record missing" from "bad password" without reading stderr::

    pbclient records get posts abc123; [ $? -eq 4 ] && echo "no such post"
"""

EXIT_SUCCESS = 0
EXIT_GENERIC_FAILURE = 1
# bad flags or arguments, no profile selected
EXIT_INVALID_USAGE = 2
# 401/403 and failed logins
EXIT_AUTH_FAILURE = 3
EXIT_NOT_FOUND = 4
EXIT_SERVER_ERROR = 5
# no response at all: DNS, refused connection, timeout
EXIT_CONNECTION_ERROR = 6
# a 2xx answer without the data it should carry (e.g. a login without a token)
EXIT_PROTOCOL_ERROR = 8
