"""Authors service: the remote schema the gateway introspects."""
