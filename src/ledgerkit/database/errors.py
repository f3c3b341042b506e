"""Translation of driver errors into the domain error taxonomy."""

import logging
from contextlib import contextmanager

from sqlalchemy import exc as sa_exc

from ledgerkit.domain.errors import ConstraintError, TransportError

logger = logging.getLogger(__name__)

# driver messages meaning the store could not be reached or did not answer in time
UNAVAILABLE_MESSAGES = (
    "database is locked",
    "database is busy",
    "database table is locked",
    "unable to open database",
    "disk i/o error",
    "timeout",
    "timed out",
)


def is_unavailable(error: sa_exc.DBAPIError) -> bool:
    """Return True if a driver error means the store was unreachable or busy.

    Syntax errors, unknown tables and other faults in the statement itself
    return False: retrying them cannot succeed.
    """
    if error.connection_invalidated:
        return True
    message = str(error.orig).lower()
    return any(marker in message for marker in UNAVAILABLE_MESSAGES)


@contextmanager
def store_errors():
    """Re-raise store failures as ConstraintError or TransportError.

    Only constraint violations and connectivity failures are translated; the
    driver message is kept verbatim and the original exception is chained as
    the cause. Any other error, including malformed SQL, propagates unchanged.
    """
    try:
        yield
    except sa_exc.IntegrityError as e:
        raise ConstraintError(str(e.orig)) from e
    except (sa_exc.OperationalError, sa_exc.InterfaceError) as e:
        if not is_unavailable(e):
            raise
        logger.error("Store unavailable: %s", e.orig)
        raise TransportError(str(e.orig)) from e
    except sa_exc.DisconnectionError as e:
        logger.error("Store connection lost: %s", e)
        raise TransportError(str(e)) from e
