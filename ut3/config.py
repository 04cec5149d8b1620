import os


def _float_or_none(value):
    return float(value) if value else None


SECRET_KEY        = os.environ.get('SECRET_KEY', 'a_secret_key')
PORT              = int(os.environ.get('UT3_PORT', '3333'))
HOST              = os.environ.get('UT3_HOST', '0.0.0.0')     # bind address (server)
IP                = os.environ.get('UT3_IP', 'localhost')     # target address (client)
ACCEPT_ERR_LIMIT  = int(os.environ.get('UT3_ACCEPT_ERR_LIMIT', '10'))
# seconds; unset means a silent peer stalls its session forever
IO_TIMEOUT        = _float_or_none(os.environ.get('UT3_IO_TIMEOUT'))
MAX_FRAME         = int(os.environ.get('UT3_MAX_FRAME', str(64 * 1024)))
LOG_LEVEL         = os.environ.get('UT3_LOG_LEVEL', 'INFO')
