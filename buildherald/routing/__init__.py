"""buildherald routing — delivers composed notifications.

The ``NotificationDispatcher`` resolves the rule and delivery target for
each pipeline event, asks the composer for the message and hands it to a
transport.  Transports are pluggable: the Slack incoming-webhook
transport for production, the in-memory buffer for dry runs and tests,
or anything implementing the ``Transport`` protocol.
"""
