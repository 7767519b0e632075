"""
Service identification for log lines.

Every log record carries `{service}@{env}:{instance}` so lines from several
checkout workers sharing one sink can be told apart.
"""

import os
from functools import lru_cache
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'checkout-service')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers get a short hostname; local runs fall back to the pid
    hostname = os.getenv('HOSTNAME') or socket.gethostname()
    instance = hostname[:12] if deploy_env != 'local_dev' else str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
