"""appsnet: keeps app containers on a shared internal network.

Long-running daemon that:
 - creates the internal ``apps-internal`` bridge network if it is missing
 - attaches compose app containers (projects prefixed ``ix-``) to it under
   ``<service>.<project>.svc.cluster.local``
 - optionally writes host gateway aliases into each container's /etc/hosts
 - follows container start events to do the same for new containers
"""

__version__ = "0.1.0"
