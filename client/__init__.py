"""client/ -- REST API client used by the command-line interface."""
