"""
Service identification attached to every log line.

Resolves to `<service>@<env>:<instance>` so logs from several API workers
can be told apart once they are collected in one place.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'voltbay-api')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers get a meaningful hostname, local runs fall back to the PID
    instance = os.getenv('HOSTNAME') or socket.gethostname() or ''
    if not instance or deploy_env == 'local_dev':
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance[:12]}'
