"""buildherald core — the event-to-message transformation engine.

Rule matching, status mapping, phrase selection, stage resolution,
change summarisation and console links.  Nothing in here talks HTTP;
fetchers and transports are passed in.
"""
