#!/usr/bin/env python
import os
import sys


def runserver_args(argv, port):
    """Add the configured port when runserver is given no address."""
    if len(argv) > 1 and argv[1] == 'runserver':
        if not any(not arg.startswith('-') for arg in argv[2:]):
            return argv + [str(port)]
    return argv


def main():
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pages_core.settings')
    from django.conf import settings
    from django.core.management import execute_from_command_line

    execute_from_command_line(runserver_args(sys.argv, settings.PORT))


if __name__ == '__main__':
    main()
